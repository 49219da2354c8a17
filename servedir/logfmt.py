# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
A very lightweight implementation of the logfmt logging format, used for all servedir diagnostics.
Each event is a single line of `key=value` pairs, written with one call to `write`.

The formatting defers to the logfmt implementation in Go:
https://pkg.go.dev/github.com/kr/logfmt#section-documentation
'''

from sys import stderr
from typing import Any, Iterable, Mapping, TextIO


def logfmt_key(key:str) -> str:
  '''
  Convert a key string into a valid logfmt key.
  Valid keys are any printable character excluding space, '=' and '"'.
  '''
  if not key: return '_'
  return key.translate(_logfmt_key_trans)


_latin1 = tuple(chr(i) for i in range(256))

_logfmt_key_trans = str.maketrans(dict.fromkeys([c for c in _latin1 if (not c.isprintable() or c in ' "=')], '_'))


def logfmt_val(value:Any) -> str:
  if value is None: return ''
  if value is True: return 'true'
  if value is False: return 'false'
  if isinstance(value, float): return f'{value:.3f}'
  return logfmt_escape(str(value))


def logfmt_escape(value:str) -> str:
  'Escape a string for logfmt.'
  if value == '': return '""'
  value = value.replace('\\', '\\\\')
  value = value.replace('"', '\\"')
  value = value.replace('\n', '\\n')
  value = value.replace('\r', '\\r')
  if ' ' in value or '=' in value or '"' in value: value = f'"{value}"'
  return value


def logfmt_items(items:Iterable[tuple[str,Any]]|Mapping[str,Any]) -> str:
  'Format an iterable or mapping of parameters into a logfmt string.'
  if isinstance(items, Mapping): items = items.items()
  return ' '.join(f'{logfmt_key(k)}={logfmt_val(v)}' for k, v in items)


def logfmt(**kwargs:Any) -> str:
  return logfmt_items(kwargs)


class Logger:
  '''
  A callable that writes one logfmt line per call to `out`.
  A Logger with `out=None` discards everything; this is how `-quiet-all` silences the server.
  Write failures are dropped: a broken log stream must not affect request handling.
  '''

  def __init__(self, out:TextIO|None=stderr) -> None:
    self.out = out


  @property
  def enabled(self) -> bool: return self.out is not None


  def __call__(self, **items:Any) -> None:
    self.write_line(logfmt_items(items))


  def write_line(self, line:str) -> None:
    out = self.out
    if out is None: return
    try:
      out.write(line + '\n')
      out.flush()
    except (OSError, ValueError): pass # ValueError is raised for writes to a closed file.


null_logger = Logger(None)
