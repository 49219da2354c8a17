# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
Directory listings.

Listing generation is split into two stages:
* `scan_listing` reads the filesystem and logs (and skips) any entries that cannot be read;
* `render_listing` is a pure template substitution over the scanned rows.
'''

from dataclasses import dataclass, field
from datetime import datetime as DateTime
from html import escape as html_escape
from os import scandir
from stat import S_ISDIR, S_ISREG
from typing import Callable, Iterable
from urllib.parse import quote as url_quote, unquote as url_unquote

from .filetypes import file_category, FileCategory


@dataclass(frozen=True, order=True)
class DirRow:
  name:str
  modified:float


@dataclass(frozen=True, order=True)
class FileRow:
  name:str
  modified:float
  size:int = field(compare=False)
  category:FileCategory = field(compare=False)


@dataclass
class Listing:
  title:str
  segments:list[str]
  dirs:list[DirRow]
  files:list[FileRow]


class RenderError(Exception):
  'Raised when the listing template cannot be rendered.'


render_error_body = 'TEMPLATE RENDER ERROR'


def scan_listing(dir_path:str, show_dotfiles:bool, log:Callable[..., None]) -> tuple[list[DirRow],list[FileRow]]:
  '''
  Enumerate the immediate children of `dir_path`, returning sorted directory and file rows.
  Entries that cannot be read are logged and skipped; an error enumerating the directory itself is raised.
  Dotfiles are omitted unless `show_dotfiles` is set.
  Entries that are neither directories nor regular files (after following symlinks) are omitted.
  '''
  dirs:list[DirRow] = []
  files:list[FileRow] = []
  with scandir(dir_path) as entries:
    for entry in entries:
      name = entry.name
      try: name.encode('utf-8')
      except UnicodeEncodeError:
        log(step='scan_entry', dir=dir_path, name=repr(name), err='undecodable file name')
        continue
      if not show_dotfiles and name.startswith('.'): continue
      try: st = entry.stat(follow_symlinks=True)
      except OSError as e:
        log(step='scan_entry', dir=dir_path, name=name, err=repr(e))
        continue
      mode = st.st_mode
      if S_ISDIR(mode):
        dirs.append(DirRow(name=name, modified=st.st_mtime))
      elif S_ISREG(mode):
        files.append(FileRow(name=name, modified=st.st_mtime, size=st.st_size, category=file_category(name)))
  dirs.sort()
  files.sort()
  return dirs, files


def breadcrumb_segments(raw_path:str) -> list[str]:
  '''
  Split the raw (percent-encoded) request path into decoded, non-empty segments.
  Each segment is decoded separately so that an encoded slash stays within its segment.
  '''
  return [url_unquote(seg, errors='replace') for seg in raw_path.split('/') if seg]


def listing_title(segments:list[str]) -> str:
  return segments[-1] if segments else '/'


def fmt_size(size:int) -> str:
  'Format a byte count with binary units.'
  if size < 1024: return f'{size} B'
  n = float(size)
  for unit in ('KiB', 'MiB', 'GiB', 'TiB', 'PiB'):
    n /= 1024
    if n < 1024: break
  return f'{n:.1f} {unit}'


def fmt_modified(timestamp:float) -> str:
  'Format a modification time in the local timezone.'
  return DateTime.fromtimestamp(timestamp).strftime('%Y/%m/%d %H:%M:%S')


listing_html_format = '''\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{title}</title>
  <style>
    body {{ font-family: sans-serif; margin: 2em auto; max-width: 60em; padding: 0 1em; }}
    nav a {{ text-decoration: none; }}
    table {{ border-collapse: collapse; width: 100%; }}
    td {{ padding: 0.25em 0.5em; }}
    td.size, td.modified {{ color: #666; text-align: right; white-space: nowrap; }}
    tr:hover {{ background: #f4f4f4; }}
    .icon::before {{ display: inline-block; width: 1.5em; }}
    .dir .icon::before {{ content: '\\1F4C1'; }}
    .archive .icon::before {{ content: '\\1F5DC'; }}
    .image .icon::before {{ content: '\\1F5BC'; }}
    .audio .icon::before {{ content: '\\1F3B5'; }}
    .video .icon::before {{ content: '\\1F39E'; }}
    .code .icon::before {{ content: '\\1F4DD'; }}
    .word .icon::before, .powerpoint .icon::before, .excel .icon::before, .pdf .icon::before {{ content: '\\1F4D1'; }}
    .alt .icon::before, .file .icon::before {{ content: '\\1F4C4'; }}
  </style>
</head>
<body>
  <nav><a href="/">/</a>{breadcrumb}</nav>
  <h1>{title}</h1>
  <table>
{dir_rows}
{file_rows}
  </table>
</body>
</html>
'''

breadcrumb_link_format = ' <a href="{href}">{name}</a> /'

dir_row_format = '''\
    <tr class="dir"><td><span class="icon"></span><a href="{href}">{name}/</a></td><td class="size">-</td><td class="modified">{modified}</td></tr>'''

file_row_format = '''\
    <tr class="{category}"><td><span class="icon"></span><a href="{href}">{name}</a></td><td class="size" title="{size} bytes">{size_str}</td><td class="modified">{modified}</td></tr>'''


def href_for(segments:Iterable[str], is_dir:bool=False) -> str:
  'Build an absolute, percent-encoded link path from decoded segments.'
  path = '/' + '/'.join(url_quote(seg, safe='', errors='surrogateescape') for seg in segments)
  if is_dir and path != '/': path += '/'
  return path


def render_listing(listing:Listing) -> str:
  '''
  Render the listing as an HTML page.
  This function performs no I/O. Any failure is raised as `RenderError`.
  '''
  try:
    segs = listing.segments
    breadcrumb = ''.join(
      breadcrumb_link_format.format(href=href_for(segs[:i+1], is_dir=True), name=_esc(seg))
      for i, seg in enumerate(segs))
    dir_rows = '\n'.join(
      dir_row_format.format(href=href_for([*segs, d.name], is_dir=True), name=_esc(d.name), modified=fmt_modified(d.modified))
      for d in listing.dirs)
    file_rows = '\n'.join(
      file_row_format.format(href=href_for([*segs, f.name]), name=_esc(f.name), category=f.category.value, size=f.size,
        size_str=fmt_size(f.size), modified=fmt_modified(f.modified))
      for f in listing.files)
    return listing_html_format.format(title=_esc(listing.title), breadcrumb=breadcrumb, dir_rows=dir_rows, file_rows=file_rows)
  except (KeyError, IndexError, ValueError, TypeError, AttributeError, OverflowError, OSError) as e:
    #^ OverflowError and OSError are raised by `fromtimestamp` for out-of-range modification times.
    raise RenderError(repr(e)) from e


def _esc(s:str) -> str: return html_escape(s, quote=True)
