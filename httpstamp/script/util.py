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

import optparse
import sys
import time
import logging

from httpstamp.date import DateValue
from httpstamp.util.yaml import load_yaml_file, YAMLError
from httpstamp.version import version

log = logging.getLogger('httpstamp.script')

OUTPUTS = ('epoch', 'http', 'datetime')
LOG_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}
CONFIG_KEYS = ('output', 'log_level')


class _StderrHandler(logging.StreamHandler):
    """
    StreamHandler that always writes to the current ``sys.stderr``.
    """
    def __init__(self, level=logging.NOTSET):
        logging.Handler.__init__(self, level)

    @property
    def stream(self):
        return sys.stderr


def setup_logging(level=logging.INFO, format=None):
    httpstamp_log = logging.getLogger('httpstamp')
    httpstamp_log.setLevel(level)

    for handler in httpstamp_log.handlers:
        if isinstance(handler, _StderrHandler):
            handler.setLevel(level)
            return

    ch = _StderrHandler(level)
    if not format:
        format = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
    formatter = logging.Formatter(format)
    ch.setFormatter(formatter)
    httpstamp_log.addHandler(ch)


def exit_with_error(msg, *args):
    print('ERROR:', msg % args, file=sys.stderr)
    sys.exit(2)


def load_config(filename):
    """
    Load and check the YAML configuration of ``httpstamp-util``.
    """
    try:
        conf = load_yaml_file(filename)
    except YAMLError as ex:
        exit_with_error('invalid configuration %s: %s', filename, ex)

    unknown = sorted(set(conf) - set(CONFIG_KEYS))
    if unknown:
        exit_with_error('unknown configuration option(s) in %s: %s',
            filename, ', '.join(map(str, unknown)))
    if 'output' in conf and conf['output'] not in OUTPUTS:
        exit_with_error('invalid output in %s: %r', filename, conf['output'])
    if 'log_level' in conf and conf['log_level'] not in tuple(LOG_LEVELS):
        exit_with_error('invalid log_level in %s: %r', filename, conf['log_level'])
    return conf


def add_common_options(parser):
    parser.add_option("-o", "--output", dest="output", choices=OUTPUTS,
        help="Output format (%s)." % ', '.join(OUTPUTS))
    parser.add_option("-f", "--config", dest="config",
        help="YAML configuration with defaults for output and log_level.")
    parser.add_option("--debug", default=False, action='store_true',
        dest="debug", help="Enable debug logging.")


def configure(options, default_output):
    """
    Merge command line `options` with the optional configuration file
    and set up logging. Returns the output format.
    """
    conf = {}
    if options.config:
        conf = load_config(options.config)

    if options.debug:
        level = logging.DEBUG
    else:
        level = LOG_LEVELS[conf.get('log_level', 'warning')]
    setup_logging(level=level)
    if conf:
        log.debug('loaded configuration %s: %r', options.config, conf)

    return options.output or conf.get('output') or default_output


def render(date, output):
    if output == 'http':
        return date.to_http_string()
    if output == 'datetime':
        return date.to_datetime_string()
    return str(date.epoch)


def parse_command(args):
    parser = optparse.OptionParser("usage: %prog parse [options] DATE...")
    add_common_options(parser)
    options, args = parser.parse_args(args)

    if len(args) < 2:
        parser.print_help()
        print("\nERROR: date required.", file=sys.stderr)
        sys.exit(1)

    output = configure(options, default_output='epoch')

    failed = False
    for arg in args[1:]:
        date = DateValue(arg)
        if date.epoch is None:
            print('ERROR: could not parse date %r' % (arg, ), file=sys.stderr)
            failed = True
            continue
        print(render(date, output))

    if failed:
        sys.exit(2)


def format_command(args):
    parser = optparse.OptionParser("usage: %prog format [options] [EPOCH...]")
    add_common_options(parser)
    options, args = parser.parse_args(args)

    output = configure(options, default_output='http')

    if len(args) < 2:
        # render the current time
        dates = [DateValue(int(time.time()))]
    else:
        dates = []
        for arg in args[1:]:
            try:
                date = DateValue(int(arg))
            except ValueError:
                exit_with_error('invalid epoch %r', arg)
            if date.epoch is None:
                exit_with_error('epoch out of range %r', arg)
            dates.append(date)

    for date in dates:
        print(render(date, output))


commands = {
    'parse': {
        'func': parse_command,
        'help': 'Parse HTTP dates and RFC 3339 timestamps.'
    },
    'format': {
        'func': format_command,
        'help': 'Format epoch seconds as HTTP or RFC 3339 date.'
    },
}


class NonStrictOptionParser(optparse.OptionParser):
    def _process_args(self, largs, rargs, values):
        while rargs:
            arg = rargs[0]
            # We handle bare "--" explicitly, and bare "-" is handled by the
            # standard arg handler since the short arg case ensures that the
            # len of the opt string is greater than 1.
            try:
                if arg == "--":
                    del rargs[0]
                    return
                elif arg[0:2] == "--":
                    self._process_long_opt(rargs, values)
                elif arg[:1] == "-" and len(arg) > 1:
                    self._process_short_opts(rargs, values)
                elif self.allow_interspersed_args:
                    largs.append(arg)
                    del rargs[0]
                else:
                    return
            except optparse.BadOptionError:
                largs.append(arg)


def print_items(data, title='Commands'):
    name_len = max(len(name) for name in data)

    if title:
        print('%s:' % (title, ), file=sys.stdout)
    for name, item in data.items():
        help = item.get('help', '')
        name = ('%%-%ds' % name_len) % name
        if help:
            help = '  ' + help
        print('  %s%s' % (name, help), file=sys.stdout)

def main(argv=None):
    if argv is None:
        argv = sys.argv
    parser = NonStrictOptionParser("usage: %prog COMMAND [options]",
        add_help_option=False)
    options, args = parser.parse_args(argv[1:])

    if len(args) < 1 or args[0] in ('--help', '-h'):
        parser.print_help()
        print()
        print_items(commands)
        sys.exit(1)

    if len(args) == 1 and args[0] == '--version':
        print('HTTPStamp ' + version)
        sys.exit(1)

    command = args[0]
    if command not in commands:
        parser.print_help()
        print()
        print_items(commands)
        print('\nERROR: unknown command %s' % (command,), file=sys.stdout)
        sys.exit(1)

    args = argv[0:1] + argv[2:]
    commands[command]['func'](args)

if __name__ == '__main__':
    main()
