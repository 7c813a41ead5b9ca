# gcmvault

Encrypt, decrypt and verify files with AES-256 in GCM mode.

The key is derived from a password with PBKDF2 (SHA-256, 600,000 iterations,
a random 16-byte salt). Every encryption uses a fresh random 12-byte nonce and
produces a 16-byte authentication tag. Everything needed to decrypt the file
again, apart from the password, is stored in a trailer appended to the
encrypted data, so an encrypted file describes itself.

When decrypting, the whole file is authenticated before any decrypted byte is
written. A wrong password or a tampered file is reported as an error; the
encrypted file is left unchanged, and an output file that was started is
removed again.

## Installation

```
pip install gcmvault
```

## Command line

```
gcmvault <command> -i INFILE [-o OUTFILE] [-k KEY | -K KEYFILE | -E NAME]
```

Commands:

| Option            | Meaning                             |
|-------------------|-------------------------------------|
| `-e`, `--encrypt` | encrypt a file                      |
| `-d`, `--decrypt` | decrypt a file                      |
| `-t`, `--verify`  | verify a file without decrypting it |
| `-p`, `--print`   | print the info of an encrypted file |
| `-v`, `--version` | print the version                   |
| `-h`, `--help`    | print usage                         |

Without a command, the usage text is printed.

Options:

| Option                 | Meaning                                               |
|------------------------|-------------------------------------------------------|
| `-i`, `--infile FILE`  | input file (required for every file command)          |
| `-o`, `--outfile FILE` | output file; omitted means in place, `-` means stdout |
| `-k`, `--key KEY`      | password given on the command line                    |
| `-K`, `--keyfile FILE` | read the password from a file                         |
| `-E`, `--keyenv NAME`  | read the password from an environment variable        |

If no key is given, the empty password is used. A key file is used whole, so a
trailing newline in it is part of the password.

The exit status is 0 on success and 1 on any error; errors are written to
standard error as `error: ...`.

### Examples

Encrypt a file into a new file, with the password taken from a file:

```
gcmvault -e -i notes.txt -o notes.enc -K key.txt
```

Decrypt it again, with the password taken from an environment variable:

```
export VAULT_KEY=secret
gcmvault -d -i notes.enc -o notes.txt -E VAULT_KEY
```

Encrypt or decrypt in place by leaving out `-o`:

```
gcmvault -e -i notes.txt -K key.txt
gcmvault -d -i notes.txt -K key.txt
```

Write the decrypted contents to standard output:

```
gcmvault -d -i notes.enc -o - -K key.txt
```

Check that a file is intact and the password is right; prints `OK` and exits
with status 0, or prints `FAILED` and exits with status 1:

```
gcmvault -t -i notes.enc -K key.txt
```

Show the stored parameters of an encrypted file (trailer size, key derivation
algorithm, salt, digest, iterations, encryption method, nonce, tag and
additional data; binary values are printed in hexadecimal):

```
gcmvault -p -i notes.enc
```

## Library

The same operations are available from Python:

```python
from gcmvault.fileops import decrypt_file, encrypt_file, verify_file
from gcmvault.secure_string import SecureString

encrypt_file("notes.txt", "notes.enc", SecureString.from_file("key.txt"), b"")
verify_file("notes.enc", SecureString.from_file("key.txt"))
decrypt_file("notes.enc", "notes.out", SecureString.from_file("key.txt"))
```

`encrypt_file_inplace`, `decrypt_file_inplace`, `encrypt_file_tostream` and
`decrypt_file_tostream` in `gcmvault.fileops` work the same way on a single
file, or with a binary stream as the output. The encrypting functions take
optional additional data, which is stored unencrypted in the trailer but
covered by the authentication tag.

Passwords are handed over as a `SecureString` (or as `str`/`bytes`). A
`SecureString` passed to these functions is consumed: its contents are wiped
once the key has been derived.

The stored parameters of an encrypted file are read with
`gcmvault.encryption_info.get_encryption_info`, which returns an
`EncryptionInfo`; `create_encryption_info` and `parse_encryption_info` build
and read the trailer itself.

For lower-level use, `gcmvault.pbkdf2.pbkdf2` derives a 32-byte key and
`pbkdf2_generate_params` returns fresh `KdfParams`. `Encrypter`, `Decrypter`
and `Verifier` in `gcmvault.cipher` run AES-256-GCM over data fed to them
piece by piece; `Decrypter.finalize` and `Verifier.finalize` return whether
the data was authentic.

## File format

An encrypted file is the ciphertext followed by a trailer of fields, each made
of a one-byte id, a three-byte big-endian length and the value:

| Id  | Field                                  |
|-----|----------------------------------------|
| `k` | key derivation algorithm (`PBKDF2`)    |
| `s` | salt                                   |
| `d` | digest (`sha256`)                      |
| `i` | iterations (4-byte big-endian integer) |
| `m` | encryption method (`AES256-GCM`)       |
| `n` | nonce                                  |
| `t` | authentication tag                     |
| `a` | additional authenticated data          |

The trailer ends with a zero id byte, the three-byte size of the whole trailer
and the signature `ENC-INFO`. Trailers larger than 1 MiB are rejected.

## Limits

- The command line has no option for additional authenticated data; it is
  available only through the library functions.
- Standard input is never read; input always comes from a file given with `-i`.
- In-place operations and decryption memory-map the file, so empty files
  cannot be encrypted in place.

## Running the tests

```
pip install gcmvault[test]
pytest
```