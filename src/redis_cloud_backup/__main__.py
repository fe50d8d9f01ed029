# pyright: standard

"""redis-cloud-backup: redis_cloud_backup/__main__.py.

Copy a Redis RDB snapshot to Google Cloud Storage and AWS S3 buckets.
Requires Python >= 3.11 and the gsutil / aws command line tools.
"""

import sys

from .cli.dispatcher import main

if __name__ == "__main__":
    sys.exit(main())
