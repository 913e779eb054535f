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
Date and time utilities.
"""
import time
import datetime

from httpstamp.date import DateValue, RFC3339_RE


def parse_httpdate(date):
    """
    Return the epoch of `date` or ``None`` if it is not a valid date.

    >>> parse_httpdate('Fri, 13 Feb 2009 23:31:30 GMT')
    1234567890
    """
    if date is None:
        return None
    return DateValue(date).epoch

def timestamp(date):
    if isinstance(date, DateValue):
        if date.epoch is None:
            raise ValueError('date value without epoch')
        return date.epoch
    if isinstance(date, datetime.datetime):
        if date.tzinfo is not None:
            return date.timestamp()
        return time.mktime(date.timetuple())
    if isinstance(date, bool) or not isinstance(date, (int, float)):
        raise TypeError('expected datetime or number, got %r' % (date, ))
    return date

def _date_value(date):
    value = DateValue(int(timestamp(date)))
    if value.epoch is None:
        raise ValueError('date out of range: %r' % (date, ))
    return value

def format_httpdate(date):
    """
    >>> format_httpdate(784111777)
    'Sun, 06 Nov 1994 08:49:37 GMT'
    """
    return _date_value(date).to_http_string()

def format_datetime(date):
    """
    >>> format_datetime(784111777)
    '1994-11-06T08:49:37Z'
    """
    return _date_value(date).to_datetime_string()


def timestamp_before(weeks=0, days=0, hours=0, minutes=0, seconds=0):
    """
    >>> import time as time_
    >>> time_.time() - timestamp_before(minutes=1) - 60 <= 1
    True
    >>> time_.time() - timestamp_before(days=1, minutes=2) - 86520 <= 1
    True
    >>> time_.time() - timestamp_before(hours=2) - 7200 <= 1
    True
    """
    delta = datetime.timedelta(weeks=weeks, days=days, hours=hours, minutes=minutes, seconds=seconds)
    return time.time() - delta.total_seconds()

def timestamp_from_isodate(isodate):
    """
    >>> timestamp_from_isodate('2009-02-13T23:31:30Z')
    1234567890
    >>> timestamp_from_isodate('2009-02-13T23:31') #doctest: +ELLIPSIS
    Traceback (most recent call last):
    ...
    ValueError: ...
    """
    if isinstance(isodate, datetime.datetime):
        return int(timestamp(isodate))
    if not RFC3339_RE.fullmatch(isodate):
        raise ValueError('not an RFC 3339 date: %r' % (isodate, ))
    epoch = DateValue(isodate).epoch
    if epoch is None:
        raise ValueError('invalid RFC 3339 date: %r' % (isodate, ))
    return epoch
