# layeredfs

`layeredfs` is a set of filesystem layers. Each layer presents a view over a
backing directory and applies its own rules to names and content. The layers
expose filesystem operations as plain Python methods: `getattr` returns a dict
of `st_*` fields, `readdir` returns a list of names, `read` returns `bytes`.
Where a layer supports them, it also has `open`, `write`, `create`, `unlink`
and `release`. Failures are raised as `OSError`, for example
`FileNotFoundError` for a missing entry.

## Layers

### `layeredfs.hexed.HexImageFS`

`HexImageFS(root, clock=None)` mirrors `root` and treats `.txt` files in it as
hex dumps. The virtual directory `/image` lists one entry per text file, named
`<name>_image_<YYYY-MM-DD>_<HH:MM:SS>.png` from the current time. The `clock`
callable supplies that time and defaults to `datetime.now`. When such an entry
is looked up with `getattr` or read with `read`, `generate_image` decodes the
matching text file and writes the bytes to `root/image/`. It reads at most
7999 characters and stops at a NUL. Each new image is recorded in
`root/conversion.log`. The helpers `hex_nibble` and `hex_to_bytes` do the
decoding. A character that is not a hex digit counts as 0, and a trailing odd
digit is dropped.

```python
from layeredfs.hexed import hex_to_bytes

assert hex_to_bytes("89504e47") == b"\x89PNG"
```

### `layeredfs.baymax.ChunkedFS`

`ChunkedFS(source_dir, log_file, chunk_size=1024, max_chunks=1000)` stores
every file as numbered chunks (`name.000`, `name.001`, ...) in `source_dir`.
Behaviour of the operations:

- `readdir` lists each file once.
- `getattr` reports the summed size of the chunks.
- `read` runs across the chunks in order.
- `write` ignores its offset and replaces the whole chunk series with the data given.

Reads, writes, creates and deletes are appended to `log_file` with a
timestamp.

```python
from layeredfs.baymax import ChunkedFS

fs = ChunkedFS("/srv/relics", "/srv/activity.log")
fs.create("/notes.txt", 0o644)
fs.write("/notes.txt", b"hello world", 0)
print(fs.read("/notes.txt", 5, 0))   # b'hello'
print(fs.readdir("/"))               # ['.', '..', 'notes.txt']
```

### `layeredfs.antink.AntinkFS`

`AntinkFS(source_path, log_path)` is a read-only mirror of `source_path`.

- **Flagged names.** A name that contains a flagged word (see `is_dangerous`) is listed reversed, and a warning is appended to `log_path`.
- **Opening files.** `open` returns an OS file descriptor. `read` reads from that descriptor, and `release` closes it.
- **Reading ordinary files.** Their content comes back ROT13-encoded (see `rot13`).
- **Reading flagged files.** Their raw bytes are returned, and the read is logged.

### `layeredfs.maimai.MaimaiFS`

`MaimaiFS(root, secret_key)` splits `root` into areas. Each area has its own
on-disk suffix and encoding:

| area         | suffix | content on disk                 |
|--------------|--------|---------------------------------|
| `starter/`   | `.mai` | plain                           |
| `metro/`     | `.ccc` | byte shift by position          |
| `dragon/`    | `.rot` | ROT13                           |
| `blackrose/` | `.bin` | plain                           |
| `heaven/`    | `.enc` | AES-256-CBC through `openssl`   |
| `youth/`     | `.gz`  | zlib-compressed                 |

The `7sref/` area is a flat alias: `7sref/<area>_<name>` resolves to
`<area>/<name>`. `readdir` strips each area's suffix from the names it lists.

These helpers are also usable on their own:

- `resolve_7sref`
- `build_real_path`
- `shift_encode`
- `shift_decode`
- `rot13`
- `compress_data`
- `decompress_data`

`decompress_data` refuses output larger than four times its input. A `youth/`
file that fails to decompress is read as an `EIO` error.

```python
from layeredfs.maimai import resolve_7sref, shift_decode, shift_encode

assert shift_decode(shift_encode(b"maimai")) == b"maimai"
assert resolve_7sref("/7sref/metro_song") == "/metro/song"
```

The `heaven/` area runs the `openssl` executable, which must be on `PATH`.
`secret_key` is passed to it as the passphrase. If `openssl` fails, no error
is raised.

## What this package does not do

The package does not mount anything and has no command-line program. Each
layer is only a set of operation methods. To get a mounted filesystem, you
must connect those methods to a FUSE binding yourself.

## Installation

Install the package with pip. It has no runtime dependencies. The `test`
extra adds pytest.