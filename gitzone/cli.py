'''
gitzone - deploy DNS zones from a git repository.

Usage:
  gitzone [options] <config> <hook> [<args>...]
  gitzone --version

Hooks:
  pre-receive    check a push before it is accepted (refs on stdin)
  post-receive   bump serials, check and deploy a push (refs on stdin)
  pre-commit     check a local commit before it is made
  post-commit    deploy what pre-commit accepted
  update-record  <args> is "<caller> <file> <field>...", the caller address
                 is taken from SSH_CLIENT

Options:
  -C <dir>, --repo=<dir>  Repository root, instead of the current directory.
  -v, --verbose           Log debug messages.
'''

from gitzone.version import __version__

import logging
import os
import signal
import sys
import docopt
from gitzone import cfg as config
from gitzone.errors import GitzoneError
from gitzone.hooks import Event, Repo, run
from gitzone.record import caller_address
from gitzone.utils import logging_setup


def _terminate(signum, frame):
	raise SystemExit(128 + signum)
#enddef


def signals_setup():
	for sig in signal.SIGTERM, signal.SIGHUP:
		signal.signal(sig, _terminate)
	#endfor
#enddef


def repo_root(path=None):
	'''
	Hooks of a non-bare repository start inside .git.
	'''
	path = os.path.abspath(path or os.getcwd())
	if os.path.basename(path) == '.git':
		path = os.path.dirname(path)
	#endif
	return path
#enddef


def read_payload(event, args, stdin=None, environ=None):
	if event in (Event.PRE_RECEIVE, Event.POST_RECEIVE):
		return (stdin or sys.stdin).readlines()
	#endif

	if event == Event.UPDATE_RECORD:
		return ' '.join(args), caller_address(os.environ if environ is None else environ)
	#endif

	return None
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
	logging.debug('config: %s' % cfg)

	try:
		event = Event(args['<hook>'])
	except ValueError:
		logging.error('unknown hook: %s' % args['<hook>'])
		return 1
	#endtry

	signals_setup()

	try:
		repo = Repo(cfg, repo_root(args['--repo']))
		payload = read_payload(event, args['<args>'])
		return run(repo, event, payload)
	except GitzoneError as e:
		logging.error('%s' % e)
		logging.error('%s rejected' % event.value)
		return 1
	#endtry
#enddef


if __name__ == '__main__':
	sys.exit(main())
#endif
