import sys
from orderguard import config
from orderguard.keys import MasterKey

path = sys.argv[1] if len(sys.argv) > 1 else config.MASTER_KEY_PATH

MasterKey.generate().save(path)

print(f"Generated master key at {path}.")
