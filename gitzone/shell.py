'''
gitzone-shell - restricted login shell for gitzone users.

Meant as the forced command of the user's SSH keys; the command the client
asked for is read from SSH_ORIGINAL_COMMAND.

Usage:
  gitzone-shell <config>
  gitzone-shell --version
'''

from gitzone.version import __version__

import getpass
import logging
import os
import shlex
import sys
import docopt
from gitzone import cfg as config
from gitzone.errors import GitzoneError, InvalidInput
from gitzone.hooks import Event, Repo, run
from gitzone.record import caller_address
from gitzone.utils import logging_setup


GIT_COMMANDS = 'git-receive-pack', 'git-upload-pack'


def parse_command(cfg, user, command):
	'''
	Map a requested command to ('git', argv) for git-shell or
	('update-record', request) for the record update hook.
	'''
	try:
		words = shlex.split(command or '')
	except ValueError as e:
		raise InvalidInput('cannot parse command: %s' % e)
	#endtry

	if not words:
		raise InvalidInput('interactive login is not allowed')
	#endif

	if words[0] in GIT_COMMANDS and len(words) == 2:
		path = words[1].rstrip('/')
		if path.endswith('.git'): path = path[:-4]

		repo_dir = cfg.repo_dir(user)
		if path not in (user, '~/' + user, repo_dir):
			raise InvalidInput('access to %s denied' % words[1])
		#endif

		return 'git', ['git-shell', '-c', '%s %s' % (words[0], shlex.quote(repo_dir))]
	#endif

	if words[0] == 'update-record':
		return 'update-record', ' '.join([user] + words[1:])
	#endif

	raise InvalidInput('command not allowed: %s' % words[0])
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

	logging_setup(cfg.log_level, cfg.log_file)

	user = getpass.getuser()

	try:
		kind, val = parse_command(cfg, user, os.environ.get('SSH_ORIGINAL_COMMAND'))

		if kind == 'git':
			logging.debug('calling: %s' % ' '.join(val))
			os.execvp(val[0], val)
		#endif

		repo = Repo(cfg, cfg.repo_dir(user))
		return run(repo, Event.UPDATE_RECORD, (val, caller_address(os.environ)))
	except GitzoneError as e:
		logging.error('%s' % e)
		return 1
	#endtry
#enddef


if __name__ == '__main__':
	sys.exit(main())
#endif
