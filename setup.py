#!/usr/bin/python3

from setuptools import setup, find_packages

from gitzone.version import __version__

setup(
	name = 'gitzone',
	version = __version__,
	description = 'deploy DNS zones from a git repository',
	scripts = ['bin/gitzone', 'bin/gitzone-shell', 'bin/gitzoned', ],
	packages = find_packages(exclude=['tests', 'tests.*']),
	data_files = [('etc', ['etc/gitzone.conf', ]), ],
	install_requires = ['docopt', 'CherryPy', ],
	extras_require = {
		'test': ['pytest', ],
	},
	python_requires = '>=3.8',
)
