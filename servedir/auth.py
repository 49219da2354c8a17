# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
HTTP Basic authentication.
'''

from base64 import b64decode
from enum import Enum
from hmac import compare_digest

from .config import AuthConfig, hash_password


auth_realm = 'Incorrect username or password'

www_authenticate_value = f'Basic realm="{auth_realm}"'


class AuthDecision(Enum):
  ALLOW = 'allow'
  DENY = 'deny'


def parse_basic_credentials(header_value:str|None) -> tuple[str,str]|None:
  '''
  Parse the value of an `Authorization` header using the Basic scheme.
  Returns (username, password), or None if the header is absent or malformed.
  A credential string without a colon is treated as a username with an empty password.
  '''
  if not header_value: return None
  scheme, _, param = header_value.strip().partition(' ')
  if scheme.lower() != 'basic': return None
  try: decoded = b64decode(param.strip(), validate=True).decode('utf-8')
  except ValueError: return None # Includes binascii.Error, UnicodeDecodeError, and non-ASCII input.
  username, _, password = decoded.partition(':')
  return (username, password)


def check_credentials(auth:AuthConfig|None, username:str, password:str) -> AuthDecision:
  '''
  Compare the supplied credentials against the configuration.
  Both comparisons are always performed, in constant time, so that the result reveals nothing about which one failed.
  '''
  if auth is None: return AuthDecision.ALLOW
  username_ok = compare_digest(_utf8(username), _utf8(auth.username))
  password_ok = compare_digest(hash_password(password), auth.password_hash)
  return AuthDecision.ALLOW if (username_ok and password_ok) else AuthDecision.DENY


def authorize(auth:AuthConfig|None, authorization:str|None) -> AuthDecision:
  'Decide a request given the configured credentials and the raw `Authorization` header value.'
  if auth is None: return AuthDecision.ALLOW
  credentials = parse_basic_credentials(authorization)
  if credentials is None: return AuthDecision.DENY
  return check_credentials(auth, *credentials)


def _utf8(s:str) -> bytes: return s.encode('utf-8', errors='surrogateescape')
