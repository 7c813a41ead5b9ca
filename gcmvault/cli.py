"""Command line interface: encrypt, decrypt, verify and inspect files."""

from dataclasses import dataclass, field
from enum import Enum, auto
import os
import sys

from .encryption_info import get_encryption_info
from .fileops import (
    decrypt_file,
    decrypt_file_inplace,
    decrypt_file_tostream,
    encrypt_file,
    encrypt_file_inplace,
    encrypt_file_tostream,
    verify_file,
)
from .secure_string import SecureString

VERSION = "1.0.0"

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

_USAGE = """\
Encrypt and decrypt files using AES-256 GCM

Usage:
    gcmvault <command> -i INFILE [-o OUTFILE] [-k KEY]

Commands:
    -e, --encrypt encrypt file
    -d, --decrypt decrypt file
    -t, --verify  verify file
    -p, --print   print info of encrypted file
    -v, --version print version

Options:
    -i, --infile  FILE specify input file name
    -o, --outfile FILE specify output file name
                       if not specified, file is encrypted / descripted inplace
    -k, --key     KEY  specify encryption key
                       if not specified, empty key is used
    -K, --keyfile FILE specify the file to read the key from
    -E, --keyenv  NAME specify environment variable to read key from
"""

# Short option letter -> whether it takes an argument.
_SHORT_OPTIONS = {
    "e": False,
    "d": False,
    "t": False,
    "p": False,
    "v": False,
    "i": True,
    "o": True,
    "k": True,
    "K": True,
    "E": True,
    "h": False,
}

_LONG_OPTIONS = {
    "encrypt": "e",
    "decrypt": "d",
    "verify": "t",
    "print": "p",
    "version": "v",
    "infile": "i",
    "outfile": "o",
    "key": "k",
    "keyfile": "K",
    "keyenv": "E",
    "help": "h",
}


class Command(Enum):
    """What the command line asks for."""

    ENCRYPT = auto()
    DECRYPT = auto()
    VERIFY = auto()
    PRINT_INFO = auto()
    PRINT_VERSION = auto()
    PRINT_HELP = auto()


@dataclass
class Context:
    """Settings gathered from the command line."""

    cmd: Command = Command.PRINT_HELP
    exit_code: int = EXIT_SUCCESS
    infile: str = ""
    outfile: str = ""
    key: SecureString = field(default_factory=SecureString)


class _OptionError(Exception):
    """An option was not recognized or lacks its argument."""


def _match_long(name):
    if name in _LONG_OPTIONS:
        return _LONG_OPTIONS[name]
    candidates = {opt for long_name, opt in _LONG_OPTIONS.items() if long_name.startswith(name)}
    if len(candidates) != 1:
        raise _OptionError(name)
    return candidates.pop()


def _iter_options(args):
    """Yield (letter, value) pairs in order; non-option arguments are skipped."""
    tokens = iter(args)
    for arg in tokens:
        if arg == "--":
            return
        if arg.startswith("--"):
            name, sep, value = arg[2:].partition("=")
            opt = _match_long(name)
            if _SHORT_OPTIONS[opt]:
                if not sep:
                    value = next(tokens, None)
                    if value is None:
                        raise _OptionError(arg)
                yield opt, value
            else:
                if sep:
                    raise _OptionError(arg)
                yield opt, None
        elif arg.startswith("-") and arg != "-":
            cluster = arg[1:]
            for pos, letter in enumerate(cluster):
                if letter not in _SHORT_OPTIONS:
                    raise _OptionError(letter)
                if not _SHORT_OPTIONS[letter]:
                    yield letter, None
                    continue
                value = cluster[pos + 1:]
                if not value:
                    value = next(tokens, None)
                    if value is None:
                        raise _OptionError(letter)
                yield letter, value
                break


def _fail(ctx, err, message):
    err.write(f"error: {message}\n")
    ctx.exit_code = EXIT_FAILURE
    ctx.cmd = Command.PRINT_HELP


def parse_args(argv, err):
    """Parse command line arguments (without the program name) into a Context."""
    ctx = Context()
    simple = {
        "e": Command.ENCRYPT,
        "d": Command.DECRYPT,
        "p": Command.PRINT_INFO,
        "v": Command.PRINT_VERSION,
        "t": Command.VERIFY,
    }
    try:
        for opt, value in _iter_options(list(argv)):
            if opt in simple:
                ctx.cmd = simple[opt]
            elif opt == "i":
                ctx.infile = value
            elif opt == "o":
                ctx.outfile = value
            elif opt == "k":
                ctx.key.assign(os.fsencode(value))
            elif opt == "K":
                try:
                    ctx.key = SecureString.from_file(value)
                except Exception as exc:
                    _fail(ctx, err, f"failed to read key file: {exc}")
                    break
            elif opt == "E":
                env_value = os.environ.get(value)
                if env_value is None:
                    _fail(ctx, err, "environment variable not set")
                    break
                ctx.key.assign(os.fsencode(env_value))
            elif opt == "h":
                ctx.cmd = Command.PRINT_HELP
                break
    except _OptionError:
        _fail(ctx, err, "unrecognized option")

    if ctx.cmd not in (Command.PRINT_HELP, Command.PRINT_VERSION) and not ctx.infile:
        _fail(ctx, err, "missing required option -i")
    return ctx


def _binary(out):
    """Return the binary stream behind a text stream, or the stream itself."""
    buffer = getattr(out, "buffer", None)
    if buffer is None:
        return out
    out.flush()
    return buffer


def _print_hex(caption, value, out):
    hex_digits = "".join(format(byte, "x") for byte in value)
    print(f"{caption}{hex_digits}", file=out)


def print_usage(out):
    """Print the usage text."""
    print(f"gcmvault, V{VERSION}", file=out)
    out.write(_USAGE)


def print_version(out):
    """Print the version."""
    print(VERSION, file=out)


def print_info(filename, out, err):
    """Print the encryption information stored in an encrypted file."""
    info = get_encryption_info(filename)
    print(f"Encryption Info Size: {info.size}", file=out)
    print("Key Derivation Function:", file=out)
    print(f"    Algorithm: {info.kdf.algorithm}", file=out)
    _print_hex("    Salt: ", info.kdf.salt, out)
    print(f"    Digest: {info.kdf.digest}", file=out)
    print(f"    Iterations: {info.kdf.iterations}", file=out)
    print("Encryption Settings:", file=out)
    print(f"    Encryption Method: {info.encryption_method}", file=out)
    _print_hex("    Nonce: ", info.nonce, out)
    _print_hex("    Tag: ", info.tag, out)
    _print_hex("    Additional Data: ", info.additional_data, out)


def encrypt(input_file, output_file, key, out):
    """Encrypt in place, to ``out`` (output "-") or to another file."""
    if not output_file:
        encrypt_file_inplace(input_file, key)
    elif output_file == "-":
        stream = _binary(out)
        encrypt_file_tostream(input_file, stream, key)
        stream.flush()
    else:
        encrypt_file(input_file, output_file, key)


def decrypt(input_file, output_file, key, out):
    """Decrypt in place, to ``out`` (output "-") or to another file."""
    if not output_file:
        decrypt_file_inplace(input_file, key)
    elif output_file == "-":
        stream = _binary(out)
        decrypt_file_tostream(input_file, stream, key)
        stream.flush()
    else:
        decrypt_file(input_file, output_file, key)


def verify(input_file, key, out, err):
    """Verify a file, report OK or FAILED and return the exit code."""
    try:
        verify_file(input_file, key)
    except Exception as exc:
        err.write(f"error: {exc}\n")
        print("FAILED", file=out)
        return EXIT_FAILURE
    print("OK", file=out)
    return EXIT_SUCCESS


def run(argv, stdin, stdout, stderr):
    """Run the command line (arguments without the program name); return the exit code."""
    ctx = parse_args(argv, stderr)
    try:
        match ctx.cmd:
            case Command.ENCRYPT:
                encrypt(ctx.infile, ctx.outfile, ctx.key.take(), stdout)
            case Command.DECRYPT:
                decrypt(ctx.infile, ctx.outfile, ctx.key.take(), stdout)
            case Command.VERIFY:
                ctx.exit_code = verify(ctx.infile, ctx.key.take(), stdout, stderr)
            case Command.PRINT_INFO:
                print_info(ctx.infile, stdout, stderr)
            case Command.PRINT_VERSION:
                print_version(stdout)
            case _:
                print_usage(stdout)
    except Exception as exc:
        stderr.write(f"error: {exc}\n")
        ctx.exit_code = EXIT_FAILURE
    finally:
        ctx.key.clear()
    return ctx.exit_code


def main(argv=None):
    """Entry point of the command."""
    if argv is None:
        argv = sys.argv[1:]
    code = run(argv, sys.stdin, sys.stdout, sys.stderr)
    sys.stdout.flush()
    return code


if __name__ == "__main__":
    raise SystemExit(main())