"""Custom exceptions raised by the client layers."""


class ClientError(Exception):
    """Top-level exception for anything going wrong inside the client."""


# --- Remote service ---
class RemoteCallError(ClientError):
    """A call to the remote game service failed (transport, reject or argument encoding)."""


class RootKeyError(RemoteCallError):
    """Root of trust could not be fetched, or a response could not be verified against it."""


# --- Address bar ---
class AddressError(ClientError):
    pass


class InvalidAddressError(AddressError):
    """The address does not carry a usable game id."""


# --- Session ---
class InvalidMoveRequestError(ClientError):
    """Move could not be encoded into notation (bad square names, bad promotion piece)."""


# --- Local state ---
class StorageError(ClientError):
    pass


class IdentityError(ClientError):
    pass
