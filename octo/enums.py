from enum import IntEnum


class ChannelType(IntEnum):
    text = 0
    dm = 1
    voice = 2
    group_dm = 3
    category = 4
    news = 5
    public_thread = 11
    private_thread = 12
    forum = 15
