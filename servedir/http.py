# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from email.utils import formatdate
from http import HTTPMethod, HTTPStatus
from typing import Mapping


OK = HTTPStatus.OK
UNAUTHORIZED = HTTPStatus.UNAUTHORIZED
FORBIDDEN = HTTPStatus.FORBIDDEN
NOT_FOUND = HTTPStatus.NOT_FOUND
METHOD_NOT_ALLOWED = HTTPStatus.METHOD_NOT_ALLOWED
INTERNAL_SERVER_ERROR = HTTPStatus.INTERNAL_SERVER_ERROR

served_methods = frozenset({HTTPMethod.GET.value, HTTPMethod.HEAD.value})

html_media_type = 'text/html; charset=utf-8'


class ResponseError(Exception):
  '''
  An exception that causes the current request to terminate with an error response.
  The pipeline raises this as an alternative to returning a response;
  the application converts it to an empty-bodied response at the ASGI boundary.
  * status: HTTPStatus.
  * reason: an optional description, used only for logging.
  * headers: additional response headers.
  '''

  def __init__(self, status:HTTPStatus, reason:str='', headers:Mapping[str,str]|None=None) -> None:
    self.status = status
    self.reason = reason
    self.headers = dict(headers) if headers else {}
    super().__init__(f'{status.value} {status.phrase}' + (f': {reason}' if reason else ''))


def NotFound(reason:str='') -> ResponseError:
  return ResponseError(NOT_FOUND, reason=reason)


def Forbidden(reason:str='') -> ResponseError:
  '''
  A policy denial. The connection is closed and no other headers are sent,
  signaling to the client that retrying with different headers will not help.
  '''
  return ResponseError(FORBIDDEN, reason=reason, headers={'Connection': 'close'})


def format_header_date(timestamp:float|None=None) -> str:
  'Format a timestamp (default: now) as an HTTP date.'
  return formatdate(timestamp, usegmt=True)
