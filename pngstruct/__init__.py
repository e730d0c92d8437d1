"""
# pngstruct: chunked file formats for humans.

A chunked file format is a sequence of self-describing records, each one tagged
with a type identifier and the length of its payload. Each chunk type is handled
by a subclass of Chunk that takes part to two pipelines:

 1. decoding: the records are read one after the other and each payload is
    parsed by the handler of its type; when the stream is over, every handler
    folds the instances it parsed into a single data object, in which it
    owns exactly one key.

 2. encoding: every handler looks at its key of the data object (and of the options)
    and returns zero or more instances; these are ordered by the sequence
    of their type and composed one after the other.

The behaviour with respect to malformed data is controlled by the "strict" flag:

 1. strict: the length of the payloads must be exactly the one of the type,
    singleton types must appear once, unknown critical types are refused
 2. lenient: the payloads must only be long enough, repetitions and unknown
    types are tolerated

the values outside the domain of a field are refused in both cases.
"""
