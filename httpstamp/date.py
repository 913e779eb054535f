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

"""
HTTP date and time values.

Implements the date formats of RFC 7230, RFC 7231 and RFC 3339::

    Sun, 06 Nov 1994 08:49:37 GMT  ; RFC 822, updated by RFC 1123
    Sunday, 06-Nov-94 08:49:37 GMT ; RFC 850, obsoleted by RFC 1036
    Sun Nov  6 08:49:37 1994       ; ANSI C's asctime() format
    1994-11-06T08:49:37Z           ; RFC 3339

All values are normalized to seconds since the epoch (UTC).
"""

import re
import time
import calendar
import logging

log = logging.getLogger('httpstamp.date')

DAYS = ('Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat')
MONTHS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
          'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')
MONTH_INDEX = dict((name, i) for i, name in enumerate(MONTHS))

EPOCH_RE = re.compile(r'\d+')

RFC1123_RE = re.compile(
    r'\w+,\s+(\d+)\s+(\w+)\s+(\d+)\s+(\d+):(\d+):(\d+)\s+GMT')

RFC3339_RE = re.compile(
    r'(\d+)-(\d+)-(\d+)T(\d+):(\d+):(\d+)(?:\.\d+)?'  # date and time
    r'(?:Z|([+-])(\d+):(\d+))?',                       # offset
    re.IGNORECASE)

RFC850_RE = re.compile(
    r'\w+,\s+(\d+)-(\w+)-(\d+)\s+(\d+):(\d+):(\d+)\s+GMT')

ASCTIME_RE = re.compile(
    r'\w+\s+(\w+)\s+(\d+)\s+(\d+):(\d+):(\d+)\s+(\d+)')

def normalize_year(year):
    """
    Expand abbreviated years the way POSIX ``timegm`` callers do.

    >>> normalize_year(94), normalize_year(5), normalize_year(1994)
    (1994, 2005, 1994)
    """
    if year < 69:
        return year + 2000
    if year < 1000:
        return year + 1900
    return year

def timegm(second, minute, hour, day, month, year):
    """
    Convert UTC fields to epoch seconds. `month` is zero based.

    Returns ``None`` if any field is out of range.
    """
    if month is None or not 0 <= month < 12:
        return None
    year = normalize_year(year)
    leap = month == 1 and calendar.isleap(year)
    if not 1 <= day <= calendar.mdays[month + 1] + leap:
        return None
    if hour > 23 or minute > 59 or second > 59:
        return None

    days = (year - 1970) * 365 + calendar.leapdays(1970, year)
    days += sum(calendar.mdays[1:month + 1]) + day - 1
    if month > 1 and calendar.isleap(year):
        days += 1
    return ((days * 24 + hour) * 60 + minute) * 60 + second

def representable(epoch):
    """
    Return True if `epoch` can be rendered by ``time.gmtime``.
    """
    try:
        time.gmtime(epoch)
    except (OverflowError, OSError, ValueError):
        return False
    return True

def _date_fields(date):
    """
    Match `date` against the known formats.

    :returns: ``(second, minute, hour, day, month, year, offset)``
        with string fields and zero based `month`, or ``None``
    """
    # RFC 822/1123 (Sun, 06 Nov 1994 08:49:37 GMT)
    m = RFC1123_RE.fullmatch(date)
    if m:
        day, month, year, h, mi, s = m.groups()
        return s, mi, h, day, MONTH_INDEX.get(month), year, 0

    # RFC 3339 (1994-11-06T08:49:37Z)
    m = RFC3339_RE.fullmatch(date)
    if m:
        year, month, day, h, mi, s, sign, off_h, off_m = m.groups()
        offset = 0
        if sign:
            # local time to UTC
            offset = int(off_h) * 3600 + int(off_m) * 60
            if sign == '+':
                offset = -offset
        return s, mi, h, day, int(month) - 1, year, offset

    # RFC 850/1036 (Sunday, 06-Nov-94 08:49:37 GMT)
    m = RFC850_RE.fullmatch(date)
    if m:
        day, month, year, h, mi, s = m.groups()
        return s, mi, h, day, MONTH_INDEX.get(month), year, 0

    # ANSI C asctime() (Sun Nov  6 08:49:37 1994)
    m = ASCTIME_RE.fullmatch(date)
    if m:
        month, day, h, mi, s, year = m.groups()
        return s, mi, h, day, MONTH_INDEX.get(month), year, 0

    return None

def parse_epoch(date):
    """
    Return the epoch seconds of `date` or ``None`` if it is invalid,
    out of range or before the epoch.
    """
    # epoch (784111777)
    if EPOCH_RE.fullmatch(date):
        epoch = int(date)
    else:
        fields = _date_fields(date)
        if fields is None:
            log.debug('unknown date format: %r', date)
            return None

        s, mi, h, day, month, year, offset = fields
        epoch = timegm(int(s), int(mi), int(h), int(day), month, int(year))
        if epoch is None:
            log.debug('date out of range: %r', date)
            return None
        epoch += offset
        if epoch < 0:
            log.debug('date before epoch: %r', date)
            return None

    if not representable(epoch):
        log.debug('date out of range: %r', date)
        return None
    return epoch

class DateValue(object):
    """
    A point in time as integer seconds since the epoch.

    The value is parsed from one of the HTTP date formats (or plain epoch
    seconds) and rendered for HTTP messages or as RFC 3339 date.
    Instances are always true, even if no `epoch` is set. Rendering an
    unset value uses the current time.

    >>> DateValue('Sun, 06 Nov 1994 08:49:37 GMT').epoch
    784111777
    >>> str(DateValue(784111777))
    'Sun, 06 Nov 1994 08:49:37 GMT'

    :ivar epoch: seconds since the epoch or ``None``
    """
    def __init__(self, date=None):
        self.epoch = None
        if date is None:
            return
        if isinstance(date, bool) or not isinstance(date, (int, str)):
            raise TypeError('expected epoch seconds or date string, got %r' % (date, ))
        # epochs take the same checks as parsed dates
        self.parse(str(date))

    def parse(self, date):
        """
        Parse `date` and set `epoch`. Invalid dates, dates before
        the epoch and dates that can not be rendered leave the value
        unchanged.

        :returns: this value
        """
        epoch = parse_epoch(date)
        if epoch is not None:
            self.epoch = epoch
        return self

    def _gmtime(self):
        epoch = self.epoch
        if epoch is None:
            epoch = int(time.time())
        return time.gmtime(epoch)

    def to_datetime_string(self):
        """
        Return RFC 3339 date and time (``1994-11-06T08:49:37Z``).
        """
        t = self._gmtime()
        return '%04d-%02d-%02dT%02d:%02d:%02dZ' % (
            t.tm_year, t.tm_mon, t.tm_mday, t.tm_hour, t.tm_min, t.tm_sec)

    def to_http_string(self):
        """
        Return date for HTTP messages (``Sun, 06 Nov 1994 08:49:37 GMT``).
        """
        t = self._gmtime()
        return '%s, %02d %s %04d %02d:%02d:%02d GMT' % (
            DAYS[(t.tm_wday + 1) % 7], t.tm_mday, MONTHS[t.tm_mon - 1],
            t.tm_year, t.tm_hour, t.tm_min, t.tm_sec)

    __str__ = to_http_string

    def __bool__(self):
        return True

    def __repr__(self):
        return 'DateValue(%r)' % (self.epoch, )
