# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from dataclasses import dataclass
from datetime import datetime as DateTime
from sys import stderr
from typing import TextIO

from .logfmt import Logger, logfmt


@dataclass(frozen=True)
class AccessLogRecord:
  timestamp:float # Unix time at the start of the request.
  peer:str
  method:str
  status:int
  latency_ms:float # Monotonic; from the start of the request to the writing of the response head.
  path:str # Percent-decoded.


class AccessLog:
  '''
  Writes one logfmt line per completed request.
  Each record is written with a single `write` call, so records from concurrent requests never interleave within a line.
  An AccessLog with `out=None` is disabled.
  '''

  def __init__(self, out:TextIO|None=stderr) -> None:
    self.logger = Logger(out)


  @property
  def enabled(self) -> bool: return self.logger.enabled


  def record(self, record:AccessLogRecord) -> None:
    if not self.enabled: return
    self.logger.write_line(format_access_record(record))


def format_access_record(record:AccessLogRecord) -> str:
  time_str = DateTime.fromtimestamp(record.timestamp).strftime('%Y/%m/%d %H:%M:%S')
  return logfmt(time=time_str, peer=record.peer, status=record.status, ms=round(record.latency_ms, 3),
    method=record.method, path=record.path)
