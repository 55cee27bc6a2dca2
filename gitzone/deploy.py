import logging
from gitzone.errors import CommandError
from gitzone.utils import call
from gitzone.zones import zone_record


class Rndc:
	def __init__(self, cmd='rndc'):
		self.cmd = cmd
	#enddef

	def reload(self, zone, cls, view):
		try:
			call([self.cmd, 'reload', zone, cls, view])
		except CommandError as e:
			logging.error('reload of %s/%s in view %s failed: %s' % (zone, cls, view, e.output.strip()))
			return False
		#endtry

		return True
	#enddef
#endclass


def deploy(vcs, mirror_dir, accepted, zones, reloader, cls='IN', branch='master'):
	'''
	Bring the serving mirror up to date, then reload every accepted zone in
	each of its views. Reload failures are logged, not raised. Returns the
	number of failed reloads.
	'''
	logging.info('updating %s' % mirror_dir)
	vcs.clone_or_sync(mirror_dir, branch)

	failed = 0
	for fn in accepted:
		rec = zone_record(fn)
		views = zones.views(rec)
		if not views: continue

		for view in views:
			logging.info('reloading %s in view %s' % (rec.zone, view))
			if not reloader.reload(rec.zone, cls, view):
				failed += 1
			#endif
		#endfor
	#endfor

	if failed:
		logging.warning('%d reload(s) failed' % failed)
	#endif

	return failed
#enddef
