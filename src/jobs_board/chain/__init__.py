"""Chain access — read facade, signer, and ABIs."""

from jobs_board.chain.reader import ChainReader
from jobs_board.chain.signer import LocalAccountSigner, build_signer, classify_error

__all__ = ["ChainReader", "LocalAccountSigner", "build_signer", "classify_error"]
