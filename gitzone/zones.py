import logging
import os
import posixpath
import re
from collections import namedtuple
from types import MappingProxyType
from gitzone.errors import ConfigError


DEFAULT = 'default'
CURRENT_DIR = '.'

_zone_stmt_re = re.compile(r'^\s*zone\s+"?([^"\s{;]+)"?', re.IGNORECASE)
_signed_re = re.compile(r'\.signed$')


ZoneRecord = namedtuple('ZoneRecord', ['zone', 'directory', 'fn'])


def zone_record(fn):
	'''
	Derive the zone name and the repository directory of the zone file `fn`
	(a path relative to the repository root).
	'''
	fn = posixpath.normpath(fn)
	zone = _signed_re.sub('', posixpath.basename(fn))
	return ZoneRecord(zone, normalize_dir(posixpath.dirname(fn)), fn)
#enddef


def normalize_dir(d):
	d = posixpath.normpath(d.strip()) if d.strip() else CURRENT_DIR
	return d.strip('/') or CURRENT_DIR
#enddef


class ZoneMap:
	'''
	Read-only directory -> zone -> views mapping of one repository.
	'''

	def __init__(self, zones):
		self._zones = MappingProxyType({
			d: MappingProxyType({z: tuple(v) for z, v in zs.items()})
			for d, zs in zones.items()
		})
	#enddef

	def views(self, rec):
		return self._zones.get(rec.directory, {}).get(rec.zone)
	#enddef

	def __contains__(self, rec):
		return self.views(rec) is not None
	#enddef

	def items(self):
		return self._zones.items()
	#enddef

	def __len__(self):
		return sum(len(i) for i in self._zones.values())
	#enddef

	def __repr__(self):
		return 'ZoneMap(%r)' % {d: dict(zs) for d, zs in self._zones.items()}
	#enddef
#endclass


def parse_views(value, default_view):
	if value is None: return [default_view]
	if isinstance(value, str):
		value = value.replace(',', ' ').split()
	#endif
	views = [v for v in value if v]
	return views or [default_view]
#enddef


def read_named_conf(fn):
	'''
	Return the names of all zones declared in the named.conf fragment `fn`.
	'''
	ret = []

	try:
		with open(fn, 'r') as f:
			for line in f:
				m = _zone_stmt_re.match(line)
				if not m: continue
				ret.append(m.group(1).rstrip('.'))
			#endfor
		#endwith
	except OSError as e:
		raise ConfigError('cannot read zone list %s: %s' % (fn, e))
	#endtry

	logging.debug('%s declares %d zone(s)' % (fn, len(ret)))
	return ret
#enddef


def _buckets(tree):
	'''
	Split a raw repository tree into (directory, {key: value}) pairs; keys
	whose value is not a mapping are bare file names of the current
	directory.
	'''
	current = {}
	ret = []

	for k, v in tree.items():
		if isinstance(v, dict):
			ret.append((normalize_dir(k), v))
		else:
			current[k] = v
		#endif
	#endfor

	return [(CURRENT_DIR, current)] + ret
#enddef


def _overlay(out, tree, default_view):
	for d, entries in _buckets(tree):
		for key, value in entries.items():
			views = parse_views(value, default_view)

			if os.path.isabs(key):
				for zone in read_named_conf(key):
					out.setdefault(d, {})[zone] = views
				#endfor
				continue
			#endif

			out.setdefault(d, {})[key] = views
		#endfor
	#endfor
#enddef


def resolve(raw, repo, default_view):
	'''
	Merge the `default` rules and the rules of `repo` from the raw zone tree
	into a ZoneMap. Repository rules win; absolute-path keys are expanded
	into the zones their file declares and never appear themselves.
	'''
	out = {}

	_overlay(out, raw.get(DEFAULT, {}), default_view)
	if repo != DEFAULT:
		_overlay(out, raw.get(repo, {}), default_view)
	#endif

	ret = ZoneMap({d: zs for d, zs in out.items() if zs})
	logging.debug('%s: %d zone(s) configured' % (repo, len(ret)))
	return ret
#enddef
