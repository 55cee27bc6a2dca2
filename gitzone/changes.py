import logging
import re


ZERO_REV = '0' * 40
EMPTY_TREE = '4b825dc642cb6eb9a060e54bf8d69288fbee4904'

UNSEEN = 'unseen'
OK = 'ok'
ERROR = 'error'

_raw_re = re.compile(r'^:\d+ \d+ [0-9a-f]+ [0-9a-f]+ ([A-Z])\d*\t(.+)$')
_path_re = re.compile(r'^[\w./+@-]+$')


class ChangedFiles:
	'''
	Paths (relative to the repository root) touched by a change, each with
	its processing status. A path is added once; adding it again is a no-op.
	'''

	def __init__(self, paths=()):
		self._status = {}
		for i in paths: self.add(i)
	#enddef

	def add(self, fn):
		if fn in self._status: return False
		self._status[fn] = UNSEEN
		return True
	#enddef

	def status(self, fn):
		return self._status.get(fn)
	#enddef

	def mark(self, fn, status):
		self._status[fn] = status
	#enddef

	def paths(self, status=None):
		return [k for k, v in self._status.items() if status is None or v == status]
	#enddef

	def __contains__(self, fn):
		return fn in self._status
	#enddef

	def __iter__(self):
		return iter(list(self._status))
	#enddef

	def __len__(self):
		return len(self._status)
	#enddef

	def __repr__(self):
		return 'ChangedFiles(%r)' % self._status
	#enddef
#endclass


def parse_raw(lines):
	ret = ChangedFiles()

	for line in lines:
		m = _raw_re.match(line)
		if not m:
			logging.debug('ignoring diff line: %s' % line)
			continue
		#endif

		st, fn = m.groups()
		if st == 'D': continue

		if not _path_re.match(fn):
			logging.warning('ignoring file with unsupported name: %s' % fn)
			continue
		#endif

		ret.add(fn)
	#endfor

	return ret
#enddef


def what_changed(vcs, old, new=None):
	'''
	Files changed between revisions `old` and `new` (or the index, when `new`
	is None). A missing or all-zero `old` means there was no history yet, so
	everything in `new` counts as changed.
	'''
	if not old or old == ZERO_REV:
		old = EMPTY_TREE
	#endif

	ret = parse_raw(vcs.diff_raw(old, new))
	logging.info('%d file(s) changed' % len(ret))
	return ret
#enddef
