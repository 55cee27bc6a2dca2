import re

import pytest

from gitzone import serial
from gitzone.changes import ERROR, OK, ChangedFiles
from tests.conftest import ZONE, read, write


@pytest.mark.parametrize('old, day, new', [
	('20240101', '20240101', '20240102'),
	('2024010100', '20240101', '2024010101'),
	('2024010199', '20240101', '2024010200'),
	('19990101', '20240601', '19990102'),
	('20230601', '20240601', '2024060100'),
	('2023060105', '20240601', '2024060100'),
	('1', '20240601', '2'),
	('1999999999', '20240601', '2000000000'),
	('2100000000', '20240601', '2100000001'),
	('4294967294', '20240601', '4294967295'),
])
def test_next_serial(old, day, new):
	assert serial.next_serial(old, day) == new
#enddef


def test_today():
	assert re.match(r'^20\d{6}$', serial.today())
#enddef


def test_rewrite_file(root):
	fn = write(root, 'example.com', ZONE % '2023060105')

	assert serial.rewrite_file(fn, '20240601') is True
	assert read(root, 'example.com') == ZONE % '2024060100'
#enddef


def test_rewrite_keeps_line_endings_and_marker(root):
	fn = write(root, 'example.com', '@ SOA ns. h. ( 41 ; AUTO_INCREMENT keep me\r\n 1h )\r\n')

	serial.rewrite_file(fn, '20240601')

	with open(fn, newline='') as f:
		assert f.read() == '@ SOA ns. h. ( 42 ; AUTO_INCREMENT keep me\r\n 1h )\r\n'
	#endwith
#enddef


def test_rewrite_file_without_marker_is_untouched(root):
	fn = write(root, 'example.com', '@ SOA ns. h. ( 2024010100 1h 15m 1w 1h )\n')
	before = read(root, 'example.com')

	assert serial.rewrite_file(fn, '20240601') is False
	assert read(root, 'example.com') == before
#enddef


def test_rewrite_only_touches_processed_files(root):
	write(root, 'a.example', ZONE % '5')
	write(root, 'b.example', 'www IN A 192.0.2.1\n')
	write(root, 'c.example', ZONE % '7')
	files = ChangedFiles(['a.example', 'b.example', 'c.example'])
	files.mark('a.example', OK)
	files.mark('b.example', OK)
	files.mark('c.example', ERROR)

	assert serial.rewrite(files, root, '20240601') == ['a.example']
	assert read(root, 'a.example') == ZONE % '6'
	assert read(root, 'c.example') == ZONE % '7'
#enddef
