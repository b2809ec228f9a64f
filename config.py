# ===== BOT SETTINGS =====
# Your bot's name and race (use plain strings)
BOT_NAME = "Foreman Bot"
BOT_RACE = "Terran"  # Options: Terran, Protoss (Zerg has no supply structure)

# ===== GAME SETTINGS =====
# Maps configuration
# Set to None to use default SC2 maps, or specify the full path to the Maps directory
# Examples (include the Maps folder in the path):
#   MAP_PATH = "C:/Program Files (x86)/StarCraft II/Maps"  # Standard Windows path
#   MAP_PATH = "/Applications/StarCraft II/Maps"          # Mac
#   MAP_PATH = "~/StarCraftII/Maps"                      # Linux
MAP_PATH = None

# List of maps to play on (randomly selected)
MAP_POOL = [
    "PersephoneAIE_v4",
    "PylonAIE_v4",
    "TorchesAIE_v4"
]

# ===== OPPONENT SETTINGS =====
OPPONENT_RACE = "Random"  # Terran, Zerg, Protoss, Random
OPPONENT_DIFFICULTY = "Easy"  # VeryEasy, Easy, Medium, Hard, VeryHard, etc.

# ===== GAME MODE =====
# Set to True to play in realtime (like a human), False for faster simulation
REALTIME = False

# ===== CONSTRUCTION =====
# Start a new supply structure once free supply drops below this.
SUPPLY_HEADROOM = 4

# Frames a freshly issued build order is left alone before the bot decides
# the worker never started and refunds its reserved cost. Raise this if
# refunds show up in the log for builds that did go on to start.
REFUND_GRACE_FRAMES = 1

# Draw worker count and ledger balances as on-screen debug text.
DEBUG_OVERLAY = True
