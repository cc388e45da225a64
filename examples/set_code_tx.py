import os.path

import keys
import model
import recover
import signer
import utils

# --- Configuration Section ---
chain_id = 1337  # Defines the Ethereum chain ID. 1337 is commonly used for local development networks (e.g., Ganache, Hardhat).
ethereum_data_dir = './projects/go-ethereum/data'  # The path to a Go-Ethereum (Geth) data directory.
                                                   # Only used when a keystore file is present.
start_nonce = 0  # The sender's current nonce. There is no node to ask, so it is set by hand.
base_fee = 7  # The base fee per gas the fee caps are derived from.

# --- Key Initialization ---
key_file = os.path.join(ethereum_data_dir,
                        'keystore/UTC--2025-06-07T23-18-27.738383000Z--71562b71999873db5b286df957af199ec94617f7')
# Constructs the full path to an Ethereum keystore file using os.path.join for OS compatibility.

if os.path.exists(key_file):
    keys_supplier = keys.Keys.from_geth_file(key_file)  # Decrypts the account key from the Geth keystore file.
else:
    keys_supplier = keys.Keys.from_hex('34954993d403229ee2e01cf6fa8222224935bc47f9534b0c0ea8054764375501')
    # Falls back to a well-known test key. Never use it for anything holding real funds.

address = keys_supplier.address_bytes  # The 20-byte address of the sender; it also becomes the delegate below.

num_of_authorizations = 2  # Defines the number of `SetCodeAuthorization` objects to create.

# --- Transaction Parameter Preparation ---
tx_params = model.BaseTxParams(chain_id, nonce=start_nonce, gas=800000,
                               gas_tip_cap=base_fee + 1, gas_fee_cap=base_fee + 2)
# Creates a base transaction parameters object.
# - chain_id: The ID of the network.
# - nonce: The transaction nonce.
# - gas: The maximum amount of gas the transaction is allowed to consume.
# - gas_tip_cap: The maximum priority fee (tip) per gas unit the sender is willing to pay to the validator.
# - gas_fee_cap: The maximum total fee per gas unit the sender is willing to pay (base fee + tip).
# `to` defaults to the zero address, `value` to 0 and `data` to empty bytes.

acc_list = [model.AccessTuple(bytes.fromhex('0000000000000000000000000000000000000001'), [
    bytes.fromhex('0000000000000000000000000000000000000000000000000000000000000001')])]
# Defines an Access List for the transaction. Access lists specify which addresses and storage keys
# a transaction is expected to access, potentially reducing gas costs.

# --- Authorization Creation ---
auths = [model.SetCodeAuthorization(chain_id=chain_id, addr=address, nonce=start_nonce + i + 1)
         for i in range(num_of_authorizations)]
# Generates unsigned `SetCodeAuthorization` objects. Each one delegates the authority's code to `addr`.
# - nonce: The authority nonce each authorization is valid for, incrementing from `start_nonce + 1`
#   because the transaction itself consumes `start_nonce`. Pass `nonce=None` to leave it unconstrained.

set_code_tx = model.SetCodeTx(tx_params=tx_params, acc_list=acc_list, set_code_auth_list=auths)
# Constructs the unsigned `SetCodeTx` transaction object.

# --- Signing ---
with keys_supplier:
    signed_tx = signer.sign_transaction(set_code_tx, keys_supplier, [keys_supplier] * num_of_authorizations)
# Signs every authorization (one key per unsigned authorization, in order) and then the transaction,
# whose hash covers the signed authorization list. Leaving the `with` block wipes the key from memory.

raw = signed_tx.encode()  # The typed envelope: 0x04 || rlp(fields), ready to be broadcast.
print(utils.to_hex(raw))

# --- Verification ---
tx_hash, sender = recover.recover_envelope(raw)
# Recovers the signing hash and the sender address from the raw bytes alone.
assert tx_hash == signed_tx.hash()
assert sender == address
assert all(recover.recover_authority(auth) == address for auth in signed_tx.set_code_auth_list)
