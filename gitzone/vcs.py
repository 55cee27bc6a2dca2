import io
import logging
import os
import subprocess
import tarfile
from gitzone.errors import CommandError
from gitzone.utils import call, git_env


class Git:
	'''
	The handful of git operations the hooks need, run against the working
	tree at `root`.
	'''

	def __init__(self, root, git='git'):
		self.root = root
		self.git = git
	#enddef

	def _git(self, *args, cwd=None, check=True, keep_index=True):
		cmd = [self.git] + list(args)
		return call(cmd, cwd=cwd or self.root, env=git_env(keep_index), check=check)
	#enddef

	def head(self):
		status, out = self._git('rev-parse', '-q', '--verify', 'HEAD^{commit}', check=False)
		if status != 0: return None
		return out.strip()
	#enddef

	def diff_raw(self, old, new=None):
		'''
		Raw diff lines between two tree-ish ids, or between `old` and the
		index when `new` is None.
		'''
		if new:
			_, out = self._git('diff-tree', '-r', '--raw', '--no-renames', '--no-commit-id', old, new)
		else:
			_, out = self._git('diff-index', '--cached', '--raw', '--no-renames', old)
		#endif
		return out.splitlines()
	#enddef

	def archive(self, rev, dest):
		cmd = [self.git, 'archive', '--format=tar', rev]
		logging.debug('calling: %s' % ' '.join(cmd))

		p = subprocess.run(cmd, cwd=self.root, env=git_env(), stdout=subprocess.PIPE, stderr=subprocess.PIPE)
		if p.returncode != 0:
			raise CommandError(cmd, p.returncode, p.stderr.decode('utf-8', 'replace'))
		#endif

		os.makedirs(dest, exist_ok=True)
		with tarfile.open(fileobj=io.BytesIO(p.stdout)) as tar:
			if hasattr(tarfile, 'data_filter'):
				tar.extractall(dest, filter='data')
			else:
				tar.extractall(dest)
			#endif
		#endwith
	#enddef

	def checkout(self, branch):
		self._git('checkout', '-q', '-f', branch)
	#enddef

	def _stash_ref(self):
		status, out = self._git('rev-parse', '-q', '--verify', 'refs/stash', check=False)
		return out.strip() if status == 0 else None
	#enddef

	def stash(self):
		'''
		Put unstaged changes aside. Returns False when there was nothing to
		stash, in which case unstash() must not be called. A repository
		without commits has nothing to stash against.
		'''
		if self.head() is None: return False

		before = self._stash_ref()
		self._git('stash', 'push', '-q', '--keep-index')
		return self._stash_ref() != before
	#enddef

	def unstash(self):
		self._git('reset', '-q', '--hard')
		self._git('stash', 'pop', '-q', '--index')
	#enddef

	def add(self, paths):
		if not paths: return
		self._git('add', '--', *paths)
	#enddef

	def commit(self, message, paths=None):
		args = ['commit', '-q', '--no-verify', '-m', message]
		if paths:
			args += ['--'] + list(paths)
		#endif
		self._git(*args)
	#enddef

	def discard(self, paths):
		if not paths: return
		self._git('checkout', '-q', 'HEAD', '--', *paths)
	#enddef

	def clone_or_sync(self, dest, branch='master'):
		if not os.path.isdir(os.path.join(dest, '.git')):
			logging.info('cloning %s into %s' % (self.root, dest))
			os.makedirs(os.path.dirname(os.path.abspath(dest)), exist_ok=True)
			self._git('clone', '-q', os.path.abspath(self.root), dest, cwd=os.path.dirname(os.path.abspath(dest)), keep_index=False)
		#endif

		self._git('fetch', '-q', 'origin', cwd=dest, keep_index=False)
		self._git('reset', '-q', '--hard', 'origin/%s' % branch, cwd=dest, keep_index=False)
	#enddef
#endclass
