# This file is part of the HTTPStamp project.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import logging
import time

import pytest

import httpstamp.date
import httpstamp.script.util


class FrozenTime(object):
    """
    Replacement for the `time` module with a fixed ``time()``.
    """
    def __init__(self, now):
        self.now = now

    def time(self):
        return self.now

    def gmtime(self, secs=None):
        if secs is None:
            secs = self.now
        return time.gmtime(secs)


@pytest.fixture
def frozen_time(monkeypatch):
    """
    Pin the wall clock to 2009-02-13T23:31:30.5Z.
    """
    frozen = FrozenTime(1234567890.5)
    monkeypatch.setattr(httpstamp.date, 'time', frozen)
    monkeypatch.setattr(httpstamp.script.util, 'time', frozen)
    return frozen


@pytest.fixture(autouse=True)
def reset_httpstamp_logging():
    httpstamp_log = logging.getLogger('httpstamp')
    handlers = list(httpstamp_log.handlers)
    level = httpstamp_log.level
    yield
    for handler in httpstamp_log.handlers[:]:
        if handler not in handlers:
            httpstamp_log.removeHandler(handler)
    httpstamp_log.setLevel(level)
