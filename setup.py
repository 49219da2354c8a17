# Dedicated to the public domain under CC0: https://creativecommons.org/publicdomain/zero/1.0/.

from setuptools import setup


setup(
  name='servedir',
  version='0.1.0',
  description='Serve a directory over HTTP or HTTPS, with listings, Basic auth, CORS and SPA fallback.',
  python_requires='>=3.11',
  packages=['servedir'],
  install_requires=[
    'starlette>=0.37',
    'uvicorn>=0.29',
  ],
  extras_require={
    'test': ['pytest>=8', 'httpx>=0.27'],
  },
  entry_points={
    'console_scripts': ['servedir=servedir.__main__:main'],
  },
)
