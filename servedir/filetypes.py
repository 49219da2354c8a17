# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

'''
File classification.
`FileCategory` is purely presentational: it selects the icon class of a row in a directory listing.
`guess_media_type` chooses the Content-Type of served files.
'''

import mimetypes
from enum import StrEnum
from os.path import splitext


class FileCategory(StrEnum):
  ARCHIVE = 'archive'
  WORD = 'word'
  POWERPOINT = 'powerpoint'
  EXCEL = 'excel'
  PDF = 'pdf'
  CODE = 'code'
  IMAGE = 'image'
  AUDIO = 'audio'
  VIDEO = 'video'
  ALT = 'alt'
  FILE = 'file'


def _cat_exts(category:FileCategory, exts:str) -> dict[str,FileCategory]:
  return dict.fromkeys(exts.split(), category)


ext_categories:dict[str,FileCategory] = {
  **_cat_exts(FileCategory.ARCHIVE, '7z bz bz2 cab gz iso rar xz zip zst zstd'),
  **_cat_exts(FileCategory.WORD, 'doc docx'),
  **_cat_exts(FileCategory.POWERPOINT, 'ppt pptx'),
  **_cat_exts(FileCategory.EXCEL, 'xls xlsx'),
  **_cat_exts(FileCategory.IMAGE, 'heic'),
  **_cat_exts(FileCategory.PDF, 'pdf'),
  **_cat_exts(FileCategory.CODE, ' '.join((
    'js cjs mjs jsx ts tsx json coffee', # JavaScript/TypeScript.
    'html htm xml xhtml vue ejs template tmpl pug art hbs tera css scss sass less', # Markup and styles.
    'py pyc',
    'java kt kts gradle groovy scala jsp', # JVM.
    'sh php',
    'c cc cpp h cmake',
    'cs xaml sln csproj', # C#.
    'go mod sum',
    'swift plist xib xcconfig entitlements xcworkspacedata pbxproj', # Apple.
    'rb rs m dart',
    'manifest rc cmd bat ps1', # Microsoft.
    'ini yaml toml conf properties', # Config.
  ))),
  **_cat_exts(FileCategory.ALT, 'lock'),
}
#^ Keys are lowercase extensions without the leading dot.


_media_type_prefix_categories = {
  'audio': FileCategory.AUDIO,
  'image': FileCategory.IMAGE,
  'video': FileCategory.VIDEO,
  'text': FileCategory.ALT,
}


def file_ext(name:str) -> str:
  'The lowercase extension of a file name, without the dot; the empty string if there is none.'
  return splitext(name)[1].removeprefix('.').lower()


def file_category(name:str) -> FileCategory:
  '''
  Classify a file by name.
  The extension table takes precedence; otherwise the category is derived from the guessed media type.
  '''
  ext = file_ext(name)
  if not ext: return FileCategory.FILE
  try: return ext_categories[ext]
  except KeyError: pass
  media_type, _ = mimetypes.guess_type(name, strict=False)
  if not media_type: return FileCategory.FILE
  if media_type == 'application/pdf': return FileCategory.PDF
  prefix = media_type.partition('/')[0]
  return _media_type_prefix_categories.get(prefix, FileCategory.FILE)


if not mimetypes.inited: mimetypes.init()

ext_media_types = { ext : media_type for (ext, media_type) in mimetypes.types_map.items() }
ext_media_types.update({
  '': 'application/octet-stream', # Default.
  '.bz2': 'application/x-bzip2',
  '.gz': 'application/gzip',
  '.js': 'text/javascript',
  '.mjs': 'text/javascript',
  '.sh': 'text/plain', # Show text instead of prompting a download.
  '.wasm': 'application/wasm',
  '.xz': 'application/x-xz',
  '.z': 'application/octet-stream',
})

_utf8_text_media_types = frozenset({'application/javascript', 'application/json', 'image/svg+xml'})


def guess_media_type(path:str) -> str:
  '''
  Guess the Content-Type for a local file path.
  Textual types are labeled as UTF-8.
  '''
  ext = splitext(path)[1].lower()
  try: media_type = ext_media_types[ext]
  except KeyError: media_type = ext_media_types['']
  if (media_type.startswith('text/') or media_type in _utf8_text_media_types) and 'charset' not in media_type:
    media_type += '; charset=utf-8'
  return media_type
