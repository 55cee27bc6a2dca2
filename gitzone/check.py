import logging
import os
from gitzone.changes import OK
from gitzone.errors import CommandError, ValidationError
from gitzone.utils import call
from gitzone.zones import zone_record


class NamedCheckzone:
	def __init__(self, cmd='named-checkzone', workdir=None):
		self.cmd = cmd
		self.workdir = workdir
	#enddef

	def check_zone(self, zone, fn):
		cmd = [self.cmd]
		if self.workdir:
			cmd += ['-w', self.workdir]
		#endif
		cmd += [zone, fn]

		try:
			status, out = call(cmd, check=False)
		except CommandError as e:
			return False, e.output
		#endtry

		logging.debug(out)
		return status == 0, out
	#enddef
#endclass


def validate(files, root, zones, checker):
	'''
	Check every processed file that is a configured zone. The first failure
	aborts with ValidationError; otherwise returns the accepted files.
	'''
	ret = []

	for fn in files.paths(OK):
		rec = zone_record(fn)
		if rec not in zones:
			logging.debug('%s: not a configured zone, not checking' % fn)
			continue
		#endif

		logging.info('checking zone %s (%s)' % (rec.zone, fn))
		ok, out = checker.check_zone(rec.zone, os.path.join(root, fn))
		if not ok:
			raise ValidationError(rec.zone, fn, out)
		#endif

		ret.append(fn)
	#endfor

	return ret
#enddef
