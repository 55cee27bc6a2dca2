class GitzoneError(Exception):
	pass
#endclass


class ConfigError(GitzoneError):
	pass
#endclass


class LockError(GitzoneError):
	pass
#endclass


class InvalidInput(GitzoneError):
	pass
#endclass


class IncludeError(GitzoneError):
	def __init__(self, fn, path, reason):
		self.fn = fn
		self.path = path
		super().__init__('%s: $INCLUDE %s: %s' % (fn, path, reason))
	#enddef
#endclass


class ValidationError(GitzoneError):
	def __init__(self, zone, fn, output):
		self.zone = zone
		self.fn = fn
		self.output = output
		super().__init__('zone %s (%s) failed check:\n%s' % (zone, fn, output))
	#enddef
#endclass


class CommandError(GitzoneError):
	def __init__(self, cmd, status, output=''):
		self.cmd = cmd
		self.status = status
		self.output = output
		super().__init__('%s returned %d\n%s' % (' '.join(cmd), status, output))
	#enddef
#endclass


class RecordNotFound(GitzoneError):
	pass
#endclass
