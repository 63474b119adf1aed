"""Named Binary Tag (NBT) tags, with raw and zlib-compressed reading and writing."""