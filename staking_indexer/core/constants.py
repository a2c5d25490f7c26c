# staking_indexer/core/constants.py

# Astar mainnet deployment
ASTAR_DEGENS_CONTRACT = "0xd59fc6bfd9732ab19b03664a45dc29b8421bda9a"
ASTAR_DEGENS_NAME = "Astar Degens"
ASTAR_BASE_CONTRACT = "0x8e2fa5a4d4e4f0581b69af2f8f2ef2cf205ae8f0"
ASTAR_SS58_FORMAT = 5
START_BLOCK = 800000

# Payload layout cut-overs
LOG_LAYOUT_HEIGHT = 1844803
TRANSACT_LAYOUT_HEIGHT = 525050

# AstarBase selectors
REGISTER_SELECTOR = "0xa3747fef"  # register(bytes,bytes)
UNREGISTER_SELECTOR = "0x26d7b3b4"  # unRegister()
SUDO_UNREGISTER_SELECTOR = "0x7107fa18"  # sudoUnRegister(address)
UNREGISTER_SELECTORS = (UNREGISTER_SELECTOR, SUDO_UNREGISTER_SELECTOR)

# Pallet item names
BOND_AND_STAKE = "DappsStaking.BondAndStake"
UNBOND_AND_UNSTAKE = "DappsStaking.UnbondAndUnstake"
NOMINATION_TRANSFER = "DappsStaking.NominationTransfer"
EVM_LOG = "EVM.Log"
ETHEREUM_TRANSACT = "Ethereum.transact"

# Hex slice bounds ("0x" prefix included)
REGISTER_LOG_EVM_SLICE = (26, 66)
UNREGISTER_INPUT_EVM_SLICE = (34, 74)
