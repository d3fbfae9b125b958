from nacl.utils import random
from ownercert_service.util import b64e

# 32 random bytes, base64; paste into the service environment
print(f"CERTIFICATE_SECRET={b64e(random(32))}")
