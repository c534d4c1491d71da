from .client import Client
from .embeds import Embed
from .enums import ChannelType
from .errors import ClientException, Forbidden, HTTPException, LoginFailure, NotFound, OctoError
from .http import RESTClient
from .models import Channel, Emoji, Guild, Member, Message, Reaction, Role, User
from .permissions import PERMISSIONS, Permissions
from .utils import MISSING, oauth_url

__version__ = "0.1.0"

__all__ = [
    "Channel",
    "ChannelType",
    "Client",
    "ClientException",
    "Embed",
    "Emoji",
    "Forbidden",
    "Guild",
    "HTTPException",
    "LoginFailure",
    "MISSING",
    "Member",
    "Message",
    "NotFound",
    "OctoError",
    "PERMISSIONS",
    "Permissions",
    "RESTClient",
    "Reaction",
    "Role",
    "User",
    "oauth_url",
]
