import datetime
import logging
import os
import re
from gitzone.changes import OK


_serial_re = re.compile(r'^(.*?)\b(\d+)(\s*;\s*AUTO_INCREMENT\b.*)$', re.IGNORECASE)


def today():
	return datetime.date.today().strftime('%Y%m%d')
#enddef


def is_date_serial(n):
	'''
	YYYYMMDDnn serials, and bare YYYYMMDD dates, of this century.
	'''
	return 2000000000 <= n < 2100000000 or 20000000 <= n < 21000000
#enddef


def next_serial(serial, day):
	'''
	Bump `serial` (a string of digits): date based serials from a previous
	day restart at <day>00, anything else is incremented.
	'''
	n = int(serial)

	if serial[:8] == day or not is_date_serial(n):
		return str(n + 1)
	#endif

	return day + '00'
#enddef


def rewrite_file(fn, day):
	'''
	Bump every auto-increment serial in `fn`. The file is written back only
	when something changed; returns whether it was.
	'''
	changed = False
	out = []

	with open(fn, 'r', newline='', errors='surrogateescape') as f:
		for line in f:
			m = _serial_re.match(line.rstrip('\r\n'))
			if m:
				new = next_serial(m.group(2), day)
				logging.info('%s: serial %s -> %s' % (fn, m.group(2), new))
				line = m.group(1) + new + m.group(3) + line[len(line.rstrip('\r\n')):]
				changed = True
			#endif

			out.append(line)
		#endfor
	#endwith

	if changed:
		with open(fn, 'w', newline='', errors='surrogateescape') as f:
			f.write(''.join(out))
		#endwith
	#endif

	return changed
#enddef


def rewrite(files, root, day):
	'''
	Run the serial bump over all successfully processed files, returning the
	ones that were modified.
	'''
	ret = []

	for fn in files.paths(OK):
		if rewrite_file(os.path.join(root, fn), day):
			ret.append(fn)
		#endif
	#endfor

	return ret
#enddef
