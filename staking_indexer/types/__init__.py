# staking_indexer/types/__init__.py

from .new import (
    HexStr,
    EvmAddress,
    EvmHash,
    PublicKey,
    NativeAddress,
    EventId,
    ErrorId,
)

# Chain Types
from .chain import (
    BlockHeader,
    CallRef,
    EventItem,
    CallItem,
    ChainItem,
    ChainBlock,
)

# Configuration Types
from .configs import (
    ChainConfig,
    DatabaseConfig,
    PathsConfig,
    ProcessingConfig,
)

# Classification Types
from .candidates import (
    Candidate,
    Irrelevant,
    StakeCandidate,
    RegisterCandidate,
    UnregisterCandidate,
    Classification,
    IRRELEVANT,
)

# Operation Types
from .operations import (
    StakeAction,
    MappingAction,
    StakeOp,
    MappingOp,
    Operation,
)

# Decoded Payload Types
from .decoded import (
    DecodedMethod,
    DecodedLog,
)

# Ledger Types
from .ledger import (
    Staker,
    Contract,
    LedgerTransaction,
)

# Errors
from .errors import (
    IndexerError,
    DecodeError,
    MalformedPayloadError,
    PersistenceError,
    SourceError,
    ProcessingError,
    create_classify_error,
    create_extract_error,
)
