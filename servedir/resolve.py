# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Map request paths to local filesystem paths beneath the served root.
'''

from dataclasses import dataclass
from enum import Enum
from os import sep as os_sep, stat
from os.path import altsep as os_altsep
from stat import S_ISDIR, S_ISREG


class TargetKind(Enum):
  FILE = 'file'
  DIRECTORY = 'directory'
  MISSING = 'missing'


@dataclass(frozen=True)
class ResolvedTarget:
  '''
  The classification of a request path.
  `is_dotfile` is set if any path segment begins with '.', regardless of whether dotfiles are served.
  `is_traversal` is set if the path attempted to escape the root; such targets are always MISSING.
  '''
  fs_path:str
  kind:TargetKind
  is_dotfile:bool = False
  is_traversal:bool = False

  @property
  def is_file(self) -> bool: return self.kind is TargetKind.FILE

  @property
  def is_dir(self) -> bool: return self.kind is TargetKind.DIRECTORY

  @property
  def is_missing(self) -> bool: return self.kind is TargetKind.MISSING


_bad_segment_chars = tuple(c for c in ('\0', os_sep, os_altsep) if c and c != '/')


def url_path_segments(path:str) -> list[str]:
  '''
  Split a percent-decoded url path into segments.
  Empty segments (leading, trailing or duplicate slashes) and '.' segments are dropped.
  '..' segments are retained so that the caller can reject them.
  '''
  return [seg for seg in path.split('/') if seg and seg != '.']


def is_traversal_segment(segment:str) -> bool:
  return segment == '..' or any(c in segment for c in _bad_segment_chars)


def resolve_target(root:str, path:str) -> ResolvedTarget:
  '''
  Resolve the percent-decoded request `path` against `root`.
  Any '..' segment fails closed: the result is MISSING with `is_traversal` set, and the filesystem is not consulted.
  Filesystem errors of any kind classify the target as MISSING.
  '''
  segments = url_path_segments(path)
  if any(is_traversal_segment(seg) for seg in segments):
    return ResolvedTarget(fs_path='', kind=TargetKind.MISSING, is_traversal=True)

  is_dotfile = any(seg.startswith('.') for seg in segments)
  fs_path = '/'.join((root.rstrip('/'), *segments)) if segments else root
  return ResolvedTarget(fs_path=fs_path, kind=classify_path(fs_path), is_dotfile=is_dotfile)


def classify_path(fs_path:str) -> TargetKind:
  'Classify a local path, following symlinks.'
  try: mode = stat(fs_path).st_mode
  except (OSError, ValueError): return TargetKind.MISSING # ValueError: embedded null byte.
  if S_ISREG(mode): return TargetKind.FILE
  if S_ISDIR(mode): return TargetKind.DIRECTORY
  return TargetKind.MISSING
