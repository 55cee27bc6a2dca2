'''
The hook pipelines: one function per git event, all with the same
(repo, payload) -> exit status contract, run under the repository lock.
'''

import enum
import logging
import os
import shutil
import tempfile
from gitzone import check, depends, serial, zones
from gitzone.changes import ChangedFiles, what_changed
from gitzone.check import NamedCheckzone
from gitzone.deploy import Rndc, deploy
from gitzone.errors import GitzoneError, InvalidInput
from gitzone.record import check_address, parse_request, update_file
from gitzone.state import LIST_FILE, LOCK_FILE, DeployList, Lock
from gitzone.vcs import Git


BRANCH = 'master'
MASTER_REF = 'refs/heads/' + BRANCH
CONFLICT_REF = 'refs/heads/conflict'


class Event(enum.Enum):
	PRE_RECEIVE = 'pre-receive'
	POST_RECEIVE = 'post-receive'
	PRE_COMMIT = 'pre-commit'
	POST_COMMIT = 'post-commit'
	UPDATE_RECORD = 'update-record'
#endclass


class Repo:
	'''
	One zone repository and the collaborators a hook run works with.

	`checker` defaults to named-checkzone run next to whichever tree is being
	checked; `day` is fixed for the lifetime of the object.
	'''

	def __init__(self, cfg, root, vcs=None, checker=None, reloader=None, day=None):
		self.cfg = cfg
		self.root = os.path.abspath(root)
		self.name = os.path.basename(self.root)
		self.zones = zones.resolve(cfg.zones, self.name, cfg.default_view)
		self.vcs = vcs or Git(self.root, cfg.git)
		self.checker = checker
		self.reloader = reloader or Rndc(cfg.rndc)
		self.day = day or serial.today()
		self.mirror = cfg.mirror_dir(self.name)
		self.lock = Lock(self.root)
		self.deploy_list = DeployList(self.root)
	#enddef

	def checker_for(self, tree):
		if self.checker: return self.checker
		return NamedCheckzone(self.cfg.named_checkzone, os.path.dirname(tree))
	#enddef

	def expand(self, files, tree):
		return depends.expand(files, tree, self.name, self.cfg.max_depth, self.cfg.unrestricted_includes)
	#enddef

	def process(self, files, tree, mutate):
		'''
		Propagate, rewrite serials (when `mutate`) and validate `files` in
		`tree`. Returns (rewritten, accepted).
		'''
		self.expand(files, tree)
		rewritten = serial.rewrite(files, tree, self.day) if mutate else []
		accepted = check.validate(files, tree, self.zones, self.checker_for(tree))
		logging.info('%d zone(s) passed the check' % len(accepted))
		return rewritten, accepted
	#enddef

	def deploy(self, accepted):
		return deploy(self.vcs, self.mirror, accepted, self.zones, self.reloader, self.cfg.cls, BRANCH)
	#enddef
#endclass


def master_updates(lines):
	'''
	Parse '<old> <new> <ref>' lines, keeping the updates of the master
	branch.
	'''
	ret = []

	for line in lines:
		if not line.strip(): continue

		try:
			old, new, ref = line.split()
		except ValueError:
			raise InvalidInput('invalid ref update: %s' % line.strip())
		#endtry

		if ref == CONFLICT_REF:
			raise InvalidInput('%s is reserved, push to %s instead' % (ref, MASTER_REF))
		#endif

		if ref != MASTER_REF:
			logging.info('ignoring %s' % ref)
			continue
		#endif

		ret.append((old, new))
	#endfor

	return ret
#enddef


def _copy_tree(src, dest):
	shutil.copytree(src, dest, symlinks=True, ignore=shutil.ignore_patterns('.git', LOCK_FILE, LIST_FILE))
#enddef


def pre_receive(repo, lines):
	for old, new in master_updates(lines):
		with tempfile.TemporaryDirectory(prefix='gitzone-') as tmp:
			tree = os.path.join(tmp, repo.name)
			repo.vcs.archive(new, tree)

			files = what_changed(repo.vcs, old, new)
			repo.process(files, tree, mutate=False)
		#endwith
	#endfor

	return 0
#enddef


def post_receive(repo, lines):
	updates = master_updates(lines)
	if not updates: return 0

	repo.vcs.checkout(BRANCH)

	for old, new in updates:
		files = what_changed(repo.vcs, old, new)
		rewritten, accepted = repo.process(files, repo.root, mutate=True)

		if rewritten:
			repo.vcs.add(rewritten)
			repo.vcs.commit('auto increment', rewritten)
			logging.info('committed new serials, pull before your next push')
		#endif

		repo.deploy(accepted)
	#endfor

	return 0
#enddef


def pre_commit(repo, _):
	stashed = repo.vcs.stash()

	try:
		files = what_changed(repo.vcs, repo.vcs.head())

		with tempfile.TemporaryDirectory(prefix='gitzone-') as tmp:
			tree = os.path.join(tmp, repo.name)
			_copy_tree(repo.root, tree)
			_, accepted = repo.process(files, tree, mutate=True)
		#endwith
	finally:
		if stashed: repo.vcs.unstash()
	#endtry

	repo.deploy_list.append(accepted)
	return 0
#enddef


def post_commit(repo, _):
	accepted = repo.deploy_list.read()

	if accepted:
		repo.deploy(accepted)
	else:
		logging.info('nothing to deploy')
	#endif

	repo.deploy_list.remove()
	return 0
#enddef


def update_record(repo, request):
	'''
	Point one record at the caller's address, then check, commit and deploy
	the file. `request` is ('<caller> <file> <field>...', address).
	'''
	arg, address = request
	caller, fn, fields = parse_request(arg)
	address = check_address(address)

	path = os.path.join(repo.root, fn)
	if not os.path.isfile(path):
		raise InvalidInput('no such file: %s' % fn)
	#endif

	if not update_file(path, fields, address):
		logging.info('nothing to do')
		return 0
	#endif

	files = ChangedFiles([fn])
	touched = [fn]
	try:
		repo.expand(files, repo.root)
		touched += serial.rewrite(files, repo.root, repo.day)
		accepted = check.validate(files, repo.root, repo.zones, repo.checker_for(repo.root))
	except GitzoneError:
		logging.error('restoring %s' % ' '.join(dict.fromkeys(touched)))
		repo.vcs.discard(list(dict.fromkeys(touched)))
		raise
	#endtry

	repo.vcs.commit('update-record by %s: %s %s %s' % (caller, fn, ' '.join(fields), address), list(dict.fromkeys(touched)))
	repo.deploy(accepted)
	return 0
#enddef


HANDLERS = {
	Event.PRE_RECEIVE: pre_receive,
	Event.POST_RECEIVE: post_receive,
	Event.PRE_COMMIT: pre_commit,
	Event.POST_COMMIT: post_commit,
	Event.UPDATE_RECORD: update_record,
}

if set(HANDLERS) != set(Event):
	raise RuntimeError('no handler for %s' % (set(Event) - set(HANDLERS)))
#endif


def run(repo, event, payload):
	with repo.lock:
		logging.debug('%s: running %s' % (repo.name, event.value))
		return HANDLERS[event](repo, payload)
	#endwith
#enddef
