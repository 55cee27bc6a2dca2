'''
gitzone record update server

Lets authenticated users point a record of their zone repository at the
address they connect from.

Usage:
  gitzoned [options] <config>
  gitzoned --version

Options:
  -p <port>, --port=<port>  Port number.
  -v, --verbose             Log debug messages.
'''

from gitzone.version import __version__

import logging
import sys
import cherrypy
import docopt
from cherrypy.lib import auth_basic
from gitzone import cfg as config
from gitzone.errors import GitzoneError, LockError
from gitzone.hooks import Event, Repo, run
from gitzone.utils import logging_setup


class RecordUpdateServer(object):
	def __init__(self, cfg, repo_factory=Repo):
		self.cfg = cfg
		self.repo_factory = repo_factory
	#enddef

	@cherrypy.expose
	def index(self):
		return 'gitzone %s' % __version__
	#enddef

	@cherrypy.expose
	def update(self, file=None, record=None, **kwargs):
		user = cherrypy.request.login
		addr = cherrypy.request.remote.ip

		if not user:
			raise cherrypy.HTTPError(401, 'not authenticated')
		#endif

		if not file or not record:
			raise cherrypy.HTTPError(400, 'file and record are required')
		#endif

		logging.info('%s from %s: %s %s' % (user, addr, file, record))

		try:
			repo = self.repo_factory(self.cfg, self.cfg.repo_dir(user))
			run(repo, Event.UPDATE_RECORD, ('%s %s %s' % (user, file, record), addr))
		except LockError as e:
			logging.warning('%s' % e)
			raise cherrypy.HTTPError(409, 'repository busy, try again later')
		except GitzoneError as e:
			logging.error('%s' % e)
			raise cherrypy.HTTPError(400, str(e))
		#endtry

		return 'OK'
	#enddef
#endclass


def app_config(cfg):
	return {
		'/': {
			'tools.auth_basic.on': True,
			'tools.auth_basic.realm': 'gitzone',
			'tools.auth_basic.checkpassword': auth_basic.checkpassword_dict(cfg.users),
			'tools.auth_basic.accept_charset': 'UTF-8',
		},
	}
#enddef


def main(argv=None):
	args = docopt.docopt(__doc__, argv=argv, version=__version__)

	try:
		cfg = config.load(args['<config>'])
	except GitzoneError as e:
		logging_setup('INFO')
		logging.error('%s' % e)
		return 1
	#endtry

	logging_setup('DEBUG' if args['--verbose'] else cfg.log_level, cfg.log_file)

	if args['--port']:
		port = int(args['--port'])
	else:
		port = cfg.port
	#endif

	if not cfg.users:
		logging.warning('no users configured, every request will be refused')
	#endif

	cherrypy.server.socket_host = cfg.host
	cherrypy.server.socket_port = port
	cherrypy.quickstart(RecordUpdateServer(cfg), '/', app_config(cfg))
	return 0
#enddef


if __name__ == '__main__':
	sys.exit(main())
#endif
