"""Persistence package.

Scope:
    - `supabase_client`: thin REST adapters for the hosted object store and table.
    - `gateway`: best-effort persistence of one generated image plus its record.
    - `library`: read path for the public generation library.

Failure model:
    Nothing in this package fails a generation request. Write failures degrade to
    inline images and temporary ids; read failures degrade to an empty library.
"""
