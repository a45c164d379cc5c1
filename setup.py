#!/usr/bin/env python
#
# Authors:
# rafael@postgresql.org.es / http://www.postgresql.org.es/
#
# Copyright (c) 2014-2016 USIT-University of Oslo
#
# This file is part of Zabbix-Cli
# https://github.com/rafaelma/zabbix-cli
#
# Zabbix-Cli is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Zabbix-Cli is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Zabbix-Cli.  If not, see <http://www.gnu.org/licenses/>.

import os.path

from setuptools import find_packages
from setuptools import setup

here = os.path.abspath(os.path.dirname(__file__))

'''
setup.py installation file
'''
about = {}
with open(os.path.join(here, 'zbx', '__about__.py'), 'r') as version_file:
    exec(version_file.read(), about)

install_requires = [
    'httpx>=0.27',
    'pydantic>=2.5',
    'pydantic-core>=2.14',
    'typer>=0.12',
    'rich>=13.7',
    'shellingham>=1.5',
    'strenum>=0.4',
    'typing_extensions>=4.8',
    'tomli>=2.0',
    'platformdirs>=4.0',
]

tests_require = [
    'pytest>=8.0',
    'pytest-httpserver>=1.0',
    'inline-snapshot>=0.13',
    'freezegun>=1.5',
    'click>=8.0',
]

#
# Setup
#
setup(name='zbx',
      version=about['__version__'],
      description='ZBX - Zabbix JSON-RPC API client and maintenance CLI',
      author='zbx contributors',
      packages=find_packages(include=['zbx', 'zbx.*']),
      python_requires='>=3.9',
      install_requires=install_requires,
      extras_require={'test': tests_require},
      entry_points={
          'console_scripts': [
              'zbx = zbx.main:main',
          ],
      },
      platforms=['Linux'],
      classifiers=[
          'Environment :: Console',
          'Development Status :: 4 - Beta',
          'Topic :: System :: Monitoring',
          'Intended Audience :: System Administrators',
          'License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)',
          'Programming Language :: Python',
          'Programming Language :: Python :: 3',
      ],
      )
