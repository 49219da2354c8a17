# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from base64 import b64encode
from hashlib import sha512

from servedir.auth import (auth_realm, AuthDecision, authorize, check_credentials, parse_basic_credentials,
  www_authenticate_value)
from servedir.config import AuthConfig


def basic(s:str) -> str: return 'Basic ' + b64encode(s.encode()).decode()


def test_parse_basic_credentials() -> None:
  assert parse_basic_credentials(basic('user:pass')) == ('user', 'pass')
  assert parse_basic_credentials(basic('user:pa:ss')) == ('user', 'pa:ss')
  assert parse_basic_credentials(basic('user')) == ('user', '')
  assert parse_basic_credentials('basic ' + b64encode(b'u:p').decode()) == ('u', 'p')
  assert parse_basic_credentials(None) is None
  assert parse_basic_credentials('') is None
  assert parse_basic_credentials('Bearer abc') is None
  assert parse_basic_credentials('Basic !!!') is None
  assert parse_basic_credentials('Basic ' + b64encode(b'\xff:x').decode()) is None
  assert parse_basic_credentials('Basic é') is None


def test_password_hash() -> None:
  auth = AuthConfig.from_password('user', 'pass')
  assert auth.password_hash == sha512(b'pass').digest()
  assert len(auth.password_hash) == 64


def test_check_credentials() -> None:
  auth = AuthConfig.from_password('user', 'pass')
  assert check_credentials(auth, 'user', 'pass') is AuthDecision.ALLOW
  assert check_credentials(auth, 'user', 'wrong') is AuthDecision.DENY
  assert check_credentials(auth, 'User', 'pass') is AuthDecision.DENY
  assert check_credentials(auth, '', '') is AuthDecision.DENY
  assert check_credentials(None, 'anyone', 'anything') is AuthDecision.ALLOW


def test_authorize() -> None:
  auth = AuthConfig.from_password('user', 'pass')
  assert authorize(auth, basic('user:pass')) is AuthDecision.ALLOW
  assert authorize(auth, basic('user:wrong')) is AuthDecision.DENY
  assert authorize(auth, None) is AuthDecision.DENY
  assert authorize(None, None) is AuthDecision.ALLOW


def test_challenge() -> None:
  assert auth_realm == 'Incorrect username or password'
  assert www_authenticate_value == 'Basic realm="Incorrect username or password"'
