import os
from configparser import ConfigParser, Error as ConfigParserError
from gitzone.errors import ConfigError


ZONES_PREFIX = 'zones:'


class Config:
	def __init__(self):
		self.zone_dir = '/var/lib/gitzone'
		self.repos_dir = '/srv/gitzone'
		self.git = 'git'
		self.named_checkzone = 'named-checkzone'
		self.rndc = 'rndc'
		self.cls = 'IN'
		self.default_view = '_default'
		self.max_depth = 256
		self.unrestricted_includes = False
		self.log_level = 'INFO'
		self.log_file = None
		self.host = '127.0.0.1'
		self.port = 8765
		self.users = {}
		self.zones = {}

	def read_from_ini(self, fn):
		ini = ConfigParser(allow_no_value=True, inline_comment_prefixes=(';', ))
		ini.optionxform = str

		try:
			with open(fn, 'r') as f:
				ini.read_file(f)
		except (OSError, ConfigParserError) as e:
			raise ConfigError('cannot read config %s: %s' % (fn, e))

		if not ini.has_section('general'):
			raise ConfigError('%s: no [general] section' % fn)

		try:
			self.zone_dir = ini.get('general', 'zone_dir', fallback=self.zone_dir)
			self.repos_dir = ini.get('general', 'repos_dir', fallback=self.repos_dir)
			self.git = ini.get('general', 'git', fallback=self.git)
			self.named_checkzone = ini.get('general', 'named_checkzone', fallback=self.named_checkzone)
			self.rndc = ini.get('general', 'rndc', fallback=self.rndc)
			self.cls = ini.get('general', 'class', fallback=self.cls)
			self.default_view = ini.get('general', 'default_view', fallback=self.default_view)
			self.max_depth = ini.getint('general', 'max_depth', fallback=self.max_depth)
			self.unrestricted_includes = ini.getboolean('general', 'unrestricted_includes', fallback=self.unrestricted_includes)
			self.log_level = ini.get('general', 'log_level', fallback=self.log_level).upper()
			self.log_file = ini.get('general', 'log_file', fallback=self.log_file) or None
			self.host = ini.get('server', 'host', fallback=self.host)
			self.port = ini.getint('server', 'port', fallback=self.port)
		except ValueError as e:
			raise ConfigError('%s: %s' % (fn, e))

		if ini.has_section('users'):
			self.users = {k: v or '' for k, v in ini.items('users', raw=True)}

		self.zones = read_zones(ini)

		err = self.check()
		if err: raise ConfigError('%s: %s' % (fn, err))

	def check(self):
		if not self.zone_dir: return 'no zone_dir!'
		if not self.default_view: return 'no default_view!'
		if self.max_depth < 0: return 'max_depth must not be negative!'
		if self.log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'): return 'invalid log_level!'

	def repo_dir(self, repo):
		return os.path.join(self.repos_dir, repo)

	def mirror_dir(self, repo):
		return os.path.join(self.zone_dir, repo)

	def __str__(self):
		l = []
		for k, v in sorted(vars(self).items()):
			if k in ('users', 'zones'): continue
			l.append('%s=\'%s\'' % (k, v))
		return ', '.join(l)


def read_zones(ini):
	'''
	Build the raw zone tree from the [zones:<repo>] and [zones:<repo>:<dir>]
	sections.

	Options of a [zones:<repo>] section land directly under the repository
	(bare zone file names); [zones:<repo>:<dir>] sections become nested
	directory mappings. Values stay unparsed, the resolver normalizes them.
	'''
	ret = {}

	for section in ini.sections():
		if not section.startswith(ZONES_PREFIX): continue

		repo, _, directory = section[len(ZONES_PREFIX):].partition(':')
		repo = repo.strip()
		if not repo:
			raise ConfigError('[%s]: missing repository name' % section)

		# DEFAULT options would leak into every section
		items = {k: v for k, v in ini.items(section, raw=True) if k not in ini.defaults()}

		tree = ret.setdefault(repo, {})
		directory = directory.strip()
		if directory:
			tree.setdefault(directory, {}).update(items)
		else:
			tree.update(items)

	return ret


def load(fn):
	cfg = Config()
	cfg.read_from_ini(fn)
	return cfg
