import os

import pytest

from gitzone.cfg import Config
from gitzone.hooks import Repo
from tests.fakes import FakeChecker, FakeGit, FakeRndc


REPO = 'example'
DAY = '20240601'

ZONE = '''$TTL 1h
@	IN	SOA	ns.example.com. hostmaster.example.com. (
		%s ;AUTO_INCREMENT
		1h 15m 1w 1h )
	IN	NS	ns.example.com.
'''


def write(root, fn, text):
	path = os.path.join(root, fn)
	os.makedirs(os.path.dirname(path), exist_ok=True)
	with open(path, 'w') as f:
		f.write(text)
	#endwith
	return path
#enddef


def read(root, fn):
	with open(os.path.join(root, fn)) as f:
		return f.read()
	#endwith
#enddef


@pytest.fixture
def cfg(tmp_path):
	ret = Config()
	ret.zone_dir = str(tmp_path / 'serve')
	ret.repos_dir = str(tmp_path / 'repos')
	ret.max_depth = 3
	ret.zones = {
		'default': {
			'example.com': 'external internal',
		},
		REPO: {
			'example.org': None,
			'reverse': {'2.0.192.in-addr.arpa': 'internal'},
		},
	}
	return ret
#enddef


@pytest.fixture
def root(cfg):
	ret = cfg.repo_dir(REPO)
	os.makedirs(ret)
	return ret
#enddef


@pytest.fixture
def make_repo(cfg, root):
	def make(diff=(), fail=(), reload_fail=()):
		return Repo(
			cfg, root,
			vcs=FakeGit(root, diff),
			checker=FakeChecker(fail),
			reloader=FakeRndc(reload_fail),
			day=DAY,
		)
	#enddef
	return make
#enddef
