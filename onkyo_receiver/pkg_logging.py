# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package-wide logger for onkyo_receiver"""

import logging

logger = logging.getLogger('onkyo_receiver')
