import logging
import os
import subprocess
from gitzone.errors import CommandError


def logging_setup(level, fn=None):
	logger = logging.getLogger()
	logger.setLevel(logging.DEBUG)

	formatter = logging.Formatter('%(asctime)s: %(levelname)s: %(message)s')

	sh = logging.StreamHandler()
	sh.setLevel(level)
	sh.setFormatter(formatter)
	logger.addHandler(sh)

	if fn:
		fh = logging.FileHandler(fn)
		fh.setLevel(level)
		fh.setFormatter(formatter)
		logger.addHandler(fh)
	#endif
#enddef


def call(cmd, cwd=None, env=None, check=True):
	'''
	Run `cmd` (an argv list) and return (status, output).

	stderr is folded into the output. A non-zero status raises CommandError
	unless `check` is false.
	'''
	logging.debug('calling: %s' % ' '.join(cmd))

	try:
		p = subprocess.run(cmd, cwd=cwd, env=env, stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
	except OSError as e:
		raise CommandError(cmd, 127, str(e))
	#endtry

	out = p.stdout.decode('utf-8', 'replace')
	if check and p.returncode != 0:
		raise CommandError(cmd, p.returncode, out)
	#endif

	return p.returncode, out
#enddef


def git_env(keep_index=True):
	'''
	Environment for git commands started from inside a hook.

	Hooks export GIT_DIR (often relative) which would point every command at
	the wrong place once the working directory changes.
	'''
	env = dict(os.environ)
	env.pop('GIT_DIR', None)
	env.pop('GIT_WORK_TREE', None)
	if not keep_index:
		env.pop('GIT_INDEX_FILE', None)
		env.pop('GIT_OBJECT_DIRECTORY', None)
		env.pop('GIT_ALTERNATE_OBJECT_DIRECTORIES', None)
		env.pop('GIT_QUARANTINE_PATH', None)
	#endif
	return env
#enddef
