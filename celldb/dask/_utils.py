"""Dask client helpers."""

from __future__ import annotations

import logging


def get_default_partitions(client):
    """Total worker threads of ``client`` (at least 1), one shard per thread."""
    workers = client.scheduler_info().get("workers", {})
    return max(sum(w.get("nthreads", 1) for w in workers.values()), 1)


def get_or_create_client(client=None):
    """Return ``client``, else the default client, else a new local cluster client.

    Parameters
    ----------
    client : distributed.Client, optional
        Client to use as is.

    Returns
    -------
    distributed.Client
        A connected client.
    """
    logging.getLogger("distributed.shuffle").setLevel(logging.ERROR)
    if client is not None:
        return client
    from distributed import Client, default_client

    try:
        return default_client()
    except ValueError:
        return Client()
