from wellcontrol.core.logging import configure_logging

configure_logging()
