import discord


PREFIX = "+"
INTENTS = discord.Intents.default()
INTENTS.members = True
INTENTS.message_content = True

DEFAULT_HEALTH_PORT = 3000
HEARTBEAT_INTERVAL_MINUTES = 5

TICKET_STATE_OPEN = "open"
TICKET_STATE_CLOSE_PENDING = "close_pending"
TICKET_STATE_DELETED = "deleted"

TICKET_CHANNEL_PREFIX = "ticket"
TICKET_NUMBER_MIN = 1000
TICKET_NUMBER_MAX = 9999
TICKET_CLOSE_DELAY_SECONDS = 10

PURGE_MIN_AMOUNT = 1
PURGE_MAX_AMOUNT = 100
PURGE_CONFIRMATION_SECONDS = 5

DEFAULT_REASON = "No reason provided"
GENERIC_FAILURE_MESSAGE = "An error occurred while executing the command."
