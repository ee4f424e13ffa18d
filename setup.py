#!/usr/bin/env python
# Licensed under a 3-clause BSD style license - see LICENSE.rst

import configparser
from itertools import chain

from setuptools import setup

################################################################################
# Programmatically generate some extras combos.
################################################################################
config = configparser.ConfigParser()
config.read("setup.cfg")
extras = {key: [line for line in value.splitlines() if line.strip()]
          for key, value in config["options.extras_require"].items()}

# Dev is everything
extras['dev'] = list(chain(*extras.values()))

# All is everything but tests and docs
exclude_keys = ("tests", "docs", "dev")
ex_extras = dict(filter(lambda i: i[0] not in exclude_keys, extras.items()))
# Concatenate all the values together for 'all'
extras['all'] = list(chain.from_iterable(ex_extras.values()))

################################################################################
# Setup call
################################################################################

setup(
    extras_require=extras,
)
