import logging
import os
import posixpath
import re
from collections import deque
from gitzone.changes import UNSEEN, OK, ERROR
from gitzone.errors import IncludeError


_include_re = re.compile(r'^\$INCLUDE\s+(\S+)', re.IGNORECASE)
_included_by_re = re.compile(r'^;\s*INCLUDED_BY\s+(.*)$', re.IGNORECASE)


def check_include(fn, path, repo, unrestricted=False):
	'''
	Return the repository-relative path `path` refers to, or None for an
	allowed include outside the repository.
	'''
	path = path.strip('"')

	if '..' in path.split('/'):
		raise IncludeError(fn, path, 'parent directory references are not allowed')
	#endif

	if path.startswith(repo + '/'):
		return posixpath.normpath(path[len(repo) + 1:])
	#endif

	if unrestricted: return None
	raise IncludeError(fn, path, 'include paths must start with %s/' % repo)
#enddef


def _check_included_by(fn, name):
	if name.startswith('/') or '..' in name.split('/'):
		raise IncludeError(fn, name, 'INCLUDED_BY names must stay inside the repository')
	#endif
	return posixpath.normpath(name)
#enddef


def read_deps(root, fn, repo, unrestricted=False):
	'''
	Parse zone file `fn`, returning (includes, included_by): the repository
	files it $INCLUDEs and the files its first line says include it.
	'''
	includes = []
	included_by = []

	with open(os.path.join(root, fn), 'r', errors='surrogateescape') as f:
		for n, line in enumerate(f):
			if n == 0:
				m = _included_by_re.match(line)
				if m:
					included_by = [_check_included_by(fn, i) for i in m.group(1).split()]
					continue
				#endif
			#endif

			m = _include_re.match(line)
			if not m: continue

			inc = check_include(fn, m.group(1), repo, unrestricted)
			if inc is not None: includes.append(inc)
		#endfor
	#endwith

	return includes, included_by
#enddef


def include_index(root, repo, unrestricted=False):
	'''
	Map every repository file to the files that $INCLUDE it, scanning the
	whole tree. Unsafe includes are skipped here; they are rejected when the
	file containing them is processed.
	'''
	ret = {}

	for d, dirs, fns in os.walk(root):
		dirs[:] = sorted(i for i in dirs if not i.startswith('.git'))

		for fn in sorted(fns):
			if fn.startswith('.gitzone-'): continue

			path = os.path.join(d, fn)
			rel = os.path.relpath(path, root).replace(os.sep, '/')
			try:
				with open(path, 'r', errors='surrogateescape') as f:
					for line in f:
						m = _include_re.match(line)
						if not m: continue
						try:
							inc = check_include(rel, m.group(1), repo, unrestricted)
						except IncludeError:
							continue
						#endtry
						if inc is not None: ret.setdefault(inc, []).append(rel)
					#endfor
				#endwith
			except OSError as e:
				logging.debug('cannot read %s: %s' % (rel, e))
			#endtry
		#endfor
	#endfor

	return ret
#enddef


def expand(files, root, repo, max_depth, unrestricted=False):
	'''
	Grow `files` with every file that includes, directly or transitively, a
	file already in it, up to `max_depth` levels away from the original
	change. Each file is parsed once and marked OK, or ERROR when it cannot
	be read. Returns the dependents left out because of the depth limit.
	'''
	includers = include_index(root, repo, unrestricted)
	skipped = []

	queue = deque((fn, 0) for fn in files.paths(UNSEEN))
	while queue:
		fn, depth = queue.popleft()
		if files.status(fn) != UNSEEN: continue

		try:
			_, included_by = read_deps(root, fn, repo, unrestricted)
		except OSError as e:
			logging.warning('cannot read %s: %s' % (fn, e))
			files.mark(fn, ERROR)
			continue
		#endtry

		files.mark(fn, OK)

		for dep in included_by + includers.get(fn, []):
			if dep in files: continue

			if depth + 1 > max_depth:
				skipped.append(dep)
				continue
			#endif

			logging.debug('%s is included by %s' % (fn, dep))
			files.add(dep)
			queue.append((dep, depth + 1))
		#endfor
	#endwhile

	skipped = [i for i in dict.fromkeys(skipped) if i not in files]
	if skipped:
		logging.warning('maximum include depth (%d) reached, not processing: %s' % (max_depth, ' '.join(skipped)))
	#endif

	return skipped
#enddef
