import os

from gitzone.deploy import Rndc, deploy
from gitzone.zones import resolve
from tests.conftest import ZONE, write
from tests.fakes import FakeGit, FakeRndc, script


def test_deploy_reloads_every_view(cfg, root):
	write(root, 'example.com', ZONE % '1')
	zones = resolve(cfg.zones, 'example', cfg.default_view)
	vcs = FakeGit(root)
	rndc = FakeRndc()
	mirror = cfg.mirror_dir('example')

	failed = deploy(vcs, mirror, ['example.com', 'reverse/2.0.192.in-addr.arpa', 'common'], zones, rndc)

	assert failed == 0
	assert vcs.calls == [('clone_or_sync', mirror, 'master')]
	assert os.path.isfile(os.path.join(mirror, 'example.com'))
	assert rndc.reloads == [
		('example.com', 'IN', 'external'),
		('example.com', 'IN', 'internal'),
		('2.0.192.in-addr.arpa', 'IN', 'internal'),
	]
#enddef


def test_reload_failures_do_not_stop_deployment(cfg, root):
	zones = resolve(cfg.zones, 'example', cfg.default_view)
	rndc = FakeRndc(fail=[('example.com', 'external')])

	failed = deploy(FakeGit(root), cfg.mirror_dir('example'), ['example.com', 'example.org'], zones, rndc, 'CH')

	assert failed == 1
	assert rndc.reloads == [
		('example.com', 'CH', 'external'),
		('example.com', 'CH', 'internal'),
		('example.org', 'CH', '_default'),
	]
#enddef


def test_rndc(tmp_path):
	log = tmp_path / 'args'
	ok = Rndc(script(tmp_path, 'echo "$@" > %s\n' % log)).reload('example.com', 'IN', 'external')

	assert ok is True
	assert log.read_text().strip() == 'reload example.com IN external'
#enddef


def test_rndc_failure(tmp_path):
	assert Rndc(script(tmp_path, 'exit 1\n')).reload('example.com', 'IN', 'external') is False
#enddef
