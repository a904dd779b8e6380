"""dualstore: replicate uploaded files to an object store and IPFS."""
