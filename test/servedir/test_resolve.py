# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

import os
from pathlib import Path

import pytest

from servedir.resolve import resolve_target, TargetKind, url_path_segments


def test_url_path_segments() -> None:
  assert url_path_segments('/') == []
  assert url_path_segments('') == []
  assert url_path_segments('/a//b/./c/') == ['a', 'b', 'c']
  assert url_path_segments('/a/../b') == ['a', '..', 'b']


def test_resolve_kinds(site:Path) -> None:
  root = str(site)
  t = resolve_target(root, '/a.txt')
  assert (t.kind, t.fs_path, t.is_dotfile, t.is_traversal) == (TargetKind.FILE, f'{root}/a.txt', False, False)
  assert resolve_target(root, '/A').kind is TargetKind.DIRECTORY
  assert resolve_target(root, '/A/').is_dir
  assert resolve_target(root, '/').fs_path == root
  assert resolve_target(root, '/').is_dir
  assert resolve_target(root, '/nope').is_missing
  assert resolve_target(root, '/a.txt/child').is_missing


def test_resolve_dotfiles(site:Path) -> None:
  root = str(site)
  t = resolve_target(root, '/.secret')
  assert t.is_file and t.is_dotfile
  t = resolve_target(root, '/.hidden_dir/x.txt')
  assert t.is_file and t.is_dotfile
  t = resolve_target(root, '/.missing')
  assert t.is_missing and t.is_dotfile
  assert not resolve_target(root, '/./a.txt').is_dotfile


@pytest.mark.parametrize('path', ['/..', '/../etc/passwd', '/A/../a.txt', '/A/../../x', '/a\0b'])
def test_resolve_traversal(site:Path, path:str) -> None:
  t = resolve_target(str(site), path)
  assert t.is_missing
  assert t.is_traversal
  assert not t.is_dotfile


def test_resolve_special_file(site:Path) -> None:
  fifo = site / 'fifo'
  try: os.mkfifo(fifo)
  except (AttributeError, OSError): pytest.skip('mkfifo not available')
  assert resolve_target(str(site), '/fifo').is_missing
