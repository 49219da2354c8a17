# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from io import StringIO

from servedir.access_log import AccessLog, AccessLogRecord, format_access_record
from servedir.logfmt import logfmt, logfmt_escape, logfmt_key, logfmt_val, Logger


def test_logfmt_key() -> None:
  assert logfmt_key('') == '_'
  assert logfmt_key('a b=c"d') == 'a_b_c_d'


def test_logfmt_val() -> None:
  assert logfmt_val(None) == ''
  assert logfmt_val(True) == 'true'
  assert logfmt_val(False) == 'false'
  assert logfmt_val(1.5) == '1.500'
  assert logfmt_val(200) == '200'


def test_logfmt_escape() -> None:
  assert logfmt_escape('') == '""'
  assert logfmt_escape('plain') == 'plain'
  assert logfmt_escape('a b') == '"a b"'
  assert logfmt_escape('a=b') == '"a=b"'
  assert logfmt_escape('say "hi"') == '"say \\"hi\\""'
  assert logfmt_escape('line\nbreak') == 'line\\nbreak'
  assert logfmt_escape('back\\slash') == 'back\\\\slash'


def test_logfmt() -> None:
  assert logfmt(step='serve', url='http://x/', n=2) == 'step=serve url=http://x/ n=2'


def test_logger() -> None:
  out = StringIO()
  log = Logger(out)
  assert log.enabled
  log(step='start', label='a b')
  log(step='stop')
  assert out.getvalue() == 'step=start label="a b"\nstep=stop\n'


def test_logger_disabled() -> None:
  log = Logger(None)
  assert not log.enabled
  log(step='start') # Does not raise.


def test_logger_closed_stream() -> None:
  out = StringIO()
  out.close()
  Logger(out)(step='start') # Does not raise.


def test_format_access_record() -> None:
  record = AccessLogRecord(timestamp=0.0, peer='10.0.0.1', method='GET', status=404, latency_ms=1.23456,
    path='/a b.txt')
  line = format_access_record(record)
  assert line.startswith('time="')
  assert ' peer=10.0.0.1 status=404 ms=1.235 method=GET path="/a b.txt"' in line
  assert '\n' not in line


def test_access_log_newline_in_path() -> None:
  out = StringIO()
  AccessLog(out).record(AccessLogRecord(timestamp=0.0, peer='-', method='GET', status=200, latency_ms=0.0,
    path='/a\nb'))
  assert out.getvalue().count('\n') == 1
  assert 'path=a' not in out.getvalue()
  assert 'path=/a\\nb' in out.getvalue()


def test_access_log_disabled() -> None:
  log = AccessLog(None)
  assert not log.enabled
  log.record(AccessLogRecord(timestamp=0.0, peer='-', method='GET', status=200, latency_ms=0.0, path='/'))
