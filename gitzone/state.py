import errno
import logging
import os
from gitzone.errors import LockError


LOCK_FILE = '.gitzone-lock'
LIST_FILE = '.gitzone-list'


class Lock:
	'''
	Exclusive per-repository lock. Taking a lock that is held fails at once.
	'''

	def __init__(self, root):
		self.fn = os.path.join(root, LOCK_FILE)
		self.held = False
	#enddef

	def acquire(self):
		try:
			fd = os.open(self.fn, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
		except OSError as e:
			if e.errno == errno.EEXIST:
				raise LockError('%s exists, another update is in progress; try again later' % self.fn)
			#endif
			raise LockError('cannot create %s: %s' % (self.fn, e))
		#endtry

		with os.fdopen(fd, 'w') as f:
			f.write('%d\n' % os.getpid())
		#endwith

		self.held = True
		logging.debug('locked %s' % self.fn)
	#enddef

	def release(self):
		if not self.held: return
		try:
			os.unlink(self.fn)
		except FileNotFoundError:
			logging.warning('%s vanished while locked' % self.fn)
		#endtry
		self.held = False
		logging.debug('unlocked %s' % self.fn)
	#enddef

	def __enter__(self):
		self.acquire()
		return self
	#enddef

	def __exit__(self, *exc):
		self.release()
	#enddef
#endclass


class DeployList:
	'''
	Files accepted by a check that could not deploy them itself, waiting for
	the step that can.
	'''

	def __init__(self, root):
		self.fn = os.path.join(root, LIST_FILE)
	#enddef

	def append(self, paths):
		if not paths: return
		with open(self.fn, 'a') as f:
			f.write(' '.join(paths) + '\n')
			f.flush()
			os.fsync(f.fileno())
		#endwith
	#enddef

	def read(self):
		try:
			with open(self.fn, 'r') as f:
				return list(dict.fromkeys(f.read().split()))
			#endwith
		except FileNotFoundError:
			return []
		#endtry
	#enddef

	def remove(self):
		try:
			os.unlink(self.fn)
		except FileNotFoundError:
			pass
		#endtry
	#enddef
#endclass
