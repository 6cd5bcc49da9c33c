import logging

from dotenv import load_dotenv

from helpdesk_bot.client import HelpdeskBot
from helpdesk_bot.common import load_application_id, load_token


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    bot = HelpdeskBot(application_id=load_application_id())
    bot.run(load_token(), log_handler=None)


if __name__ == "__main__":
    main()
