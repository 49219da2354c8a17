# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Resolved server configuration.
All configuration is gathered into immutable objects before the listener starts;
request handlers only ever read it.
'''

import ssl
from dataclasses import dataclass
from hashlib import sha512
from os import environ
from os.path import isabs, isdir, realpath
from typing import Self


@dataclass(frozen=True)
class AuthConfig:
  '''
  HTTP Basic credentials.
  Only a SHA-512 digest of the password is kept.
  '''
  username:str
  password_hash:bytes

  @classmethod
  def from_password(cls, username:str, password:str) -> Self:
    return cls(username=username, password_hash=hash_password(password))


def hash_password(password:str) -> bytes:
  'One-way, unsalted, deterministic 512-bit digest of a password.'
  return sha512(password.encode('utf-8', errors='surrogateescape')).digest()


@dataclass(frozen=True)
class ServerConfig:
  '''
  The request pipeline configuration.
  * root: absolute, canonical path of the served directory.
  * show_index: render listings for directories without an `index.html`.
  * show_dotfiles: allow access to paths with segments beginning with '.'.
  * spa_mode: serve `root/index.html` for otherwise unresolvable paths.
  * no_cache: add `Cache-Control: no-store` to responses.
  * cors_origin: value of `Access-Control-Allow-Origin`; None disables CORS.
    An origin that is not a valid header value falls back to '*'.
  * auth: Basic credentials; None disables authentication.
  '''
  root:str
  show_index:bool = True
  show_dotfiles:bool = False
  spa_mode:bool = False
  no_cache:bool = False
  cors_origin:str|None = None
  auth:AuthConfig|None = None

  def __post_init__(self) -> None:
    if not isabs(self.root): raise ValueError(f'root must be an absolute path: {self.root!r}')
    if self.root != '/' and self.root.endswith('/'): raise ValueError(f'root must not end with a slash: {self.root!r}')
    if self.cors_origin is not None and not is_header_value(self.cors_origin):
      object.__setattr__(self, 'cors_origin', '*')


def is_header_value(value:str) -> bool:
  'True if `value` can be sent as an HTTP header value: latin-1 text without control characters.'
  return all((' ' <= c <= '\xff' and c != '\x7f') or c == '\t' for c in value)


@dataclass(frozen=True)
class TlsConfig:
  cert_path:str
  key_path:str

  def ssl_context(self) -> ssl.SSLContext:
    '''
    Load the certificate chain and private key.
    This is called at startup so that bad key material is a startup error rather than a handshake failure.
    '''
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    ctx.load_cert_chain(certfile=self.cert_path, keyfile=self.key_path)
    return ctx


@dataclass(frozen=True)
class ListenConfig:
  host:str
  port:int
  tls:TlsConfig|None = None

  @property
  def scheme(self) -> str: return 'https' if self.tls else 'http'


def parse_auth_arg(arg:str) -> AuthConfig:
  '''
  Parse a `username:password` argument.
  The string is split on the first colon, so the password may itself contain colons.
  '''
  username, colon, password = arg.partition(':')
  if not colon or not password: raise ValueError('Password not found')
  if not username: raise ValueError('Username not found')
  return AuthConfig.from_password(username, password)


def resolve_root(path:str) -> str:
  'Return the canonical absolute path of the directory to serve.'
  root = realpath(path)
  if not isdir(root): raise NotADirectoryError(f'Parameter is not a directory: {path!r}')
  return root


# Environment.

_bool_strs = {
  '': False,
  '0': False, 'false': False, 'no': False, 'off': False, 'f': False, 'n': False,
  '1': True, 'true': True, 'yes': True, 'on': True, 't': True, 'y': True,
}


def env_bool(key:str, default:bool=False) -> bool:
  '''
  Get a boolean from the environment.
  Raises ValueError if the value is not one of the common boolean strings.
  '''
  try: val = environ[key]
  except KeyError: return default
  try: return _bool_strs[val.strip().lower()]
  except KeyError as e: raise ValueError(f'invalid boolean value for environment variable {key}: {val!r}') from e


def is_serve_dbg() -> bool:
  'Return True if the environment has SERVEDIR_DBG set to a true-like string value.'
  return env_bool('SERVEDIR_DBG')


def serve_host() -> str:
  'Get the listening address specified by the environment variable SERVEDIR_HOST. Defaults to `0.0.0.0`.'
  return environ.get('SERVEDIR_HOST', '0.0.0.0')


def serve_port() -> int:
  'Get the listening port specified by the environment variable SERVEDIR_PORT. Defaults to 8000.'
  return int(environ.get('SERVEDIR_PORT', '8000'))
