import ipaddress
import logging
import posixpath
import re
from gitzone.errors import InvalidInput, RecordNotFound


def parse_request(arg):
	'''
	Split an update request '<caller> <file> <field>...' into its parts.
	'''
	words = arg.split()
	if len(words) < 3:
		raise InvalidInput('usage: <caller> <file> <field>...')
	#endif

	caller, fn, fields = words[0], words[1], words[2:]
	return caller, check_path(fn), fields
#enddef


def check_path(fn):
	norm = posixpath.normpath(fn)
	if norm.startswith('/') or '..' in norm.split('/') or norm == '.':
		raise InvalidInput('invalid file name: %s' % fn)
	#endif
	return norm
#enddef


def check_address(addr):
	try:
		return str(ipaddress.ip_address(addr))
	except ValueError:
		raise InvalidInput('invalid address: %s' % addr)
	#endtry
#enddef


def caller_address(environ):
	'''
	The client address of the SSH connection this process serves.
	'''
	for var in 'SSH_CLIENT', 'SSH_CONNECTION':
		val = environ.get(var)
		if val: return check_address(val.split()[0])
	#endfor

	raise InvalidInput('cannot determine caller address')
#enddef


def _record_re(fields):
	prefix = r'\s+'.join(re.escape(i) for i in fields)
	return re.compile(r'^(\s*%s\s+)([^\s;]+)(.*)$' % prefix, re.IGNORECASE)
#enddef


def _same_address(a, b):
	try:
		return ipaddress.ip_address(a) == ipaddress.ip_address(b)
	except ValueError:
		return a.lower() == b.lower()
	#endtry
#enddef


def update_line(lines, fields, address):
	'''
	Point the first record in `lines` that starts with `fields` at `address`.
	Returns the index of that line and whether it changed; `lines` is
	modified in place.
	'''
	r = _record_re(fields)

	for n, line in enumerate(lines):
		if line.lstrip().startswith(';'): continue

		body = line.rstrip('\r\n')
		m = r.match(body)
		if not m: continue

		if _same_address(m.group(2), address):
			logging.info('%s already points to %s' % (' '.join(fields), address))
			return n, False
		#endif

		logging.info('%s: %s -> %s' % (' '.join(fields), m.group(2), address))
		lines[n] = m.group(1) + address + m.group(3) + line[len(body):]
		return n, True
	#endfor

	raise RecordNotFound('no record matching \'%s\'' % ' '.join(fields))
#enddef


def update_file(fn, fields, address):
	with open(fn, 'r', newline='', errors='surrogateescape') as f:
		lines = f.readlines()
	#endwith

	_, changed = update_line(lines, fields, address)

	if changed:
		with open(fn, 'w', newline='', errors='surrogateescape') as f:
			f.write(''.join(lines))
		#endwith
	#endif

	return changed
#enddef
