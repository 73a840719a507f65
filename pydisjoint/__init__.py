"""
The main pydisjoint package.
"""
import logging
import sys

# Default format for logs
LOG_FORMAT = '%(asctime)s.%(msecs)03d [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

def setup_logging(verbose: int = 0) -> None:
    """Setup logging with appropriate level based on verbosity.
    
    Args:
        verbose: Verbosity level
            0 = WARNING and above (the progress display owns the terminal)
            1 = INFO, shows git/github calls
            2 = DEBUG and above, includes command output
    """
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Get the root logger and reconfigure handlers
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Remove any existing stream handlers
    for handler in logger.handlers[:]:
        if type(handler) is logging.StreamHandler:
            logger.removeHandler(handler)
        
    # Add handler with our format
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    logger.addHandler(handler)
