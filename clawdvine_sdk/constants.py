import os

# Service Constants (Default: ClawdVine production on Base)
# Values read with os.getenv here are resolved at import time, before any
# .env file is loaded, so they only see the process environment. Settings that
# must honour .env or --env-file go through ClientConfig.from_env instead.

# --- API ---
API_BASE = os.getenv("CLAWDVINE_API_BASE", "https://api.clawdvine.sh")
SHARE_BASE = "https://clawdvine.sh/media"

# --- GENERATION DEFAULTS ---
DEFAULT_VIDEO_MODEL = "xai-grok-imagine"
DEFAULT_DURATION = 8
DEFAULT_ASPECT_RATIO = "9:16"
DEFAULT_IMAGE_AGENT_ID = "1:22831"
KNOWN_VIDEO_MODELS = ("xai-grok-imagine", "sora-2", "sora-2-pro", "fal-kling-o3")
SLOW_MODELS = ("fal-kling-o3",)

# --- NETWORKS ---
NETWORK_BASE = "base"
NETWORK_SOLANA = "solana"
SOLANA_MAINNET_CAIP = "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp"
SOLANA_RPC_URL = os.getenv("SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com")
BASE_CHAIN_ID = 8453

# --- EXPLORERS ---
BASE_EXPLORER_TX = "https://basescan.org/tx/{tx}"
SOLANA_EXPLORER_TX = "https://solscan.io/tx/{tx}"

# --- TOKEN ---
BASE_RPC_URL = os.getenv("BASE_RPC_URL", "https://mainnet.base.org")
IMAGINE_TOKEN = os.getenv("IMAGINE_TOKEN", "0x963e83082e0500ce5Da98c78E79A49C09084Bb07")
IMAGINE_DECIMALS = 18
MIN_BALANCE = 10_000_000

# --- SIWE ---
SIWE_DOMAIN = "api.clawdvine.sh"
SIWE_URI = "https://api.clawdvine.sh"
SIWE_STATEMENT = "Joining ClawdVine Agentic Media Network"
