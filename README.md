# recraft

A small console client for classic block-game multiplayer servers. It keeps a
list of servers in an NBT file, asks each server for its message of the day and
player count in the background, and can open a connection to a selected server
and log in.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running

```
recraft [--servers PATH]
```

`--servers` names the server list file (default `servers.dat` in the current
directory). The file is uncompressed NBT with a `servers` list of compounds,
each holding `name` and `ip` strings.

The server list screen is printed to the terminal. Keys are given as lines on
standard input: one or more key names per line, separated by spaces, commas or
`+` (for example `down` or `l+r`). Names are case-insensitive; an unknown name
prints an error and the line is ignored.

- `UP` / `DOWN` move the selection
- `A` adds a server; you are prompted for a name and an address
  (`host`, `host:port` or `[address]:port`; the port defaults to 25565)
- `B` deletes the selected server
- `X` polls every server again
- `Y` reloads the server list file and polls again
- `SELECT` opens the connect screen for the selected server
- `START` exits, as does the end of input

Changes to the list are saved at once, by writing a temporary file
(`<file>_tmp`) and moving it over the list file.

Polling connects to each server with a three-second timeout, sends the status
request byte `0xFE`, expects `0xFF` followed by a string of the form
`motd§online§max`, and shows the message of the day and `online / max`. A
server that cannot be reached or answers badly shows `???`. Only IPv4 addresses
can be polled.

On the connect screen, `A` connects to port 25565 of the server's address
(which must be a plain IPv4 address), logs in as `Nintendo3DS` and then
answers keep-alive packets until the server closes the connection; `SELECT`
returns to the list.

## What it does not do

Logging in is as far as the client goes. After the login packets it only
prints the first byte of each message received and answers keep-alives; there
is no world, no chat and no gameplay. When run from the `recraft` command, the
connection loop ends only when the server disconnects (or on Ctrl-C). The
packet registry in `recraft.packet` has no packet types registered.

## Using the library

### NBT

`recraft.nbt.containers` has `NBTTagCompound` and `NBTTagList`;
`recraft.nbt.primitives` has the byte, short, int, long, float, double, byte
array and string tags; `recraft.nbt.base` has `read_tag`, `write_tag`,
`create_tag_of_type` and `get_tag_name`.

```python
from recraft.nbt.containers import NBTTagCompound
from recraft.nbt.compressed import write_map_to_byte_array, load_map_from_byte_array

root = NBTTagCompound()
root.set_string("name", "My server")
root.set_integer("port", 25565)

data = write_map_to_byte_array(root)      # zlib-compressed
restored = load_map_from_byte_array(data)
assert restored.get_integer("port") == 25565
```

Getters return a default (`0`, `0.0`, `""`, `b""` or `None`) when the key is
missing or holds a tag of another type. `set_string` refuses an empty string
with `ValueError`. `recraft.nbt.compressed` also reads and writes uncompressed
NBT in memory (`read_from_memory`, `write_to_memory`) and in files
(`read_map_from_file`, `save_map_to_file`, `save_map_to_file_with_backup`);
decompression is limited to 1 MiB of output.

### Other modules

- `recraft.dataio`: `DataInputStream` and `DataOutputStream`, big-endian
  integers and 16-bit-per-character strings.
- `recraft.server_storage`: `ServerNBTStorage`, a saved server entry with
  `to_compound()` and `from_compound()`.
- `recraft.server_list`: the `ServerList` screen, `ServerInfo`, `parse_host`,
  `read_utf16_string` and `parse_status_response`.
- `recraft.polling`: `ServerPollingThread`, the background poller.
- `recraft.connect`: login and keep-alive packet encoders, `connect_to_server`
  and the `ServerConnect` screen.
- `recraft.packet`: the abstract `Packet`, `PacketRegistry`, and `read_nbt` /
  `write_nbt` for length-prefixed compressed NBT.
- `recraft.screen`: the `Key` flags, `parse_keys` and the abstract `Screen`.
- `recraft.log`: `LogManager`, coloured console messages that `L`+`R` toggles.