import os
import shutil
import subprocess
import tarfile

import pytest

from gitzone.changes import ZERO_REV, what_changed
from gitzone.errors import CommandError
from gitzone.hooks import Event, Repo, run
from gitzone.state import LIST_FILE
from gitzone.vcs import Git
from tests.conftest import DAY, ZONE, read, write
from tests.fakes import FakeChecker, FakeRndc


pytestmark = pytest.mark.skipif(not shutil.which('git'), reason='git not installed')


def git(root, *args):
	return subprocess.run(['git'] + list(args), cwd=root, check=True, stdout=subprocess.PIPE).stdout.decode().strip()
#enddef


@pytest.fixture
def repo(tmp_path, monkeypatch):
	for k in 'AUTHOR', 'COMMITTER':
		monkeypatch.setenv('GIT_%s_NAME' % k, 'Zone Admin')
		monkeypatch.setenv('GIT_%s_EMAIL' % k, 'hostmaster@example.com')
	#endfor
	monkeypatch.setenv('GIT_CONFIG_NOSYSTEM', '1')
	monkeypatch.setenv('HOME', str(tmp_path))
	for k in 'GIT_DIR', 'GIT_WORK_TREE', 'GIT_INDEX_FILE':
		monkeypatch.delenv(k, raising=False)
	#endfor

	root = str(tmp_path / 'example')
	os.makedirs(root)
	git(root, 'init', '-q')
	git(root, 'symbolic-ref', 'HEAD', 'refs/heads/master')
	return root
#enddef


def commit_all(root, msg='update'):
	git(root, 'add', '-A')
	git(root, 'commit', '-q', '-m', msg)
	return git(root, 'rev-parse', 'HEAD')
#enddef


def test_head(repo):
	assert Git(repo).head() is None

	write(repo, 'example.com', 'a\n')
	rev = commit_all(repo)

	assert Git(repo).head() == rev
#enddef


def test_initial_import(repo):
	write(repo, 'example.com', 'a\n')
	write(repo, 'reverse/2.0.192.in-addr.arpa', 'b\n')
	rev = commit_all(repo)

	assert set(what_changed(Git(repo), ZERO_REV, rev)) == {'example.com', 'reverse/2.0.192.in-addr.arpa'}
#enddef


def test_revision_range(repo):
	write(repo, 'example.com', 'a\n')
	write(repo, 'example.org', 'b\n')
	write(repo, 'example.net', 'c\n')
	old = commit_all(repo)
	write(repo, 'example.org', 'changed\n')
	os.unlink(os.path.join(repo, 'example.net'))
	new = commit_all(repo)

	assert set(what_changed(Git(repo), old, new)) == {'example.org'}
#enddef


def test_index_diff(repo):
	write(repo, 'example.com', 'a\n')
	head = commit_all(repo)
	write(repo, 'example.com', 'staged\n')
	write(repo, 'example.org', 'unstaged\n')
	git(repo, 'add', 'example.com')

	assert set(what_changed(Git(repo), head)) == {'example.com'}
#enddef


def test_bad_revision(repo):
	with pytest.raises(CommandError):
		Git(repo).diff_raw('1' * 40, '2' * 40)
	#endwith
#enddef


def test_archive(repo, tmp_path):
	write(repo, 'sub/example.com', 'a\n')
	rev = commit_all(repo)
	write(repo, 'sub/example.com', 'dirty\n')

	Git(repo).archive(rev, str(tmp_path / 'tree' / 'example'))

	assert read(str(tmp_path / 'tree' / 'example'), 'sub/example.com') == 'a\n'
#enddef


def test_archive_without_extraction_filters(repo, tmp_path, monkeypatch):
	write(repo, 'example.com', 'a\n')
	rev = commit_all(repo)
	monkeypatch.delattr(tarfile, 'data_filter', raising=False)

	Git(repo).archive(rev, str(tmp_path / 'tree' / 'example'))

	assert read(str(tmp_path / 'tree' / 'example'), 'example.com') == 'a\n'
#enddef


def test_stash(repo):
	write(repo, 'example.com', 'a\n')
	commit_all(repo)
	vcs = Git(repo)

	assert vcs.stash() is False

	write(repo, 'example.com', 'staged\n')
	git(repo, 'add', 'example.com')
	write(repo, 'example.com', 'unstaged\n')

	assert vcs.stash() is True
	assert read(repo, 'example.com') == 'staged\n'

	vcs.unstash()
	assert read(repo, 'example.com') == 'unstaged\n'
	assert git(repo, 'diff', '--cached', '--name-only') == 'example.com'
#enddef


def test_stash_without_commits(repo):
	write(repo, 'example.com', 'staged\n')
	git(repo, 'add', 'example.com')
	write(repo, 'example.com', 'unstaged\n')

	assert Git(repo).stash() is False
	assert read(repo, 'example.com') == 'unstaged\n'
#enddef


def test_pre_commit_initial_commit(repo, cfg):
	write(repo, 'example.com', ZONE % '1')
	git(repo, 'add', 'example.com')
	zone_repo = Repo(cfg, repo, checker=FakeChecker(), reloader=FakeRndc(), day=DAY)

	assert run(zone_repo, Event.PRE_COMMIT, None) == 0

	assert zone_repo.checker.zones() == ['example.com']
	assert read(repo, 'example.com') == ZONE % '1'
	assert read(repo, LIST_FILE).split() == ['example.com']
#enddef


def test_commit_and_discard(repo):
	write(repo, 'example.com', 'a\n')
	write(repo, 'example.org', 'b\n')
	commit_all(repo)
	vcs = Git(repo)

	write(repo, 'example.com', 'committed\n')
	write(repo, 'example.org', 'discarded\n')
	vcs.commit('auto increment', ['example.com'])
	vcs.discard(['example.org'])

	assert git(repo, 'log', '-1', '--format=%s') == 'auto increment'
	assert git(repo, 'show', 'HEAD:example.com') == 'committed'
	assert read(repo, 'example.org') == 'b\n'
#enddef


def test_clone_or_sync(repo, tmp_path):
	mirror = str(tmp_path / 'serve' / 'example')
	write(repo, 'example.com', 'a\n')
	commit_all(repo)
	vcs = Git(repo)

	vcs.clone_or_sync(mirror)
	assert read(mirror, 'example.com') == 'a\n'

	write(repo, 'example.com', 'b\n')
	commit_all(repo)
	write(mirror, 'example.com', 'local drift\n')

	vcs.clone_or_sync(mirror)
	assert read(mirror, 'example.com') == 'b\n'
#enddef
