"""
Bundled ABIs for the organization core contracts.

Kernel and ACL have no artifact in the package registry, so their
interfaces ship with the module. Only the entry points the commands use
are listed.
"""


def _fn(name, inputs, outputs=(), mutability="nonpayable"):
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": "", "type": t} for t in outputs],
        "stateMutability": mutability,
    }


KERNEL_ABI = [
    _fn("newAppInstance", [("_appId", "bytes32"), ("_appBase", "address")], ["address"]),
    _fn(
        "newAppInstance",
        [("_appId", "bytes32"), ("_appBase", "address"),
         ("_initializePayload", "bytes"), ("_setDefault", "bool")],
        ["address"],
    ),
    _fn("setApp", [("_namespace", "bytes32"), ("_appId", "bytes32"), ("_app", "address")]),
    _fn("acl", [], ["address"], "view"),
    _fn("APP_MANAGER_ROLE", [], ["bytes32"], "view"),
]

ACL_ABI = [
    _fn(
        "createPermission",
        [("_entity", "address"), ("_app", "address"), ("_role", "bytes32"), ("_manager", "address")],
    ),
    _fn("grantPermission", [("_entity", "address"), ("_app", "address"), ("_role", "bytes32")]),
    _fn("revokePermission", [("_entity", "address"), ("_app", "address"), ("_role", "bytes32")]),
    _fn("removePermissionManager", [("_app", "address"), ("_role", "bytes32")]),
    _fn("setPermissionManager", [("_newManager", "address"), ("_app", "address"), ("_role", "bytes32")]),
    _fn("getPermissionManager", [("_app", "address"), ("_role", "bytes32")], ["address"], "view"),
    _fn("CREATE_PERMISSIONS_ROLE", [], ["bytes32"], "view"),
]

REPO_ABI = [
    _fn("getLatest", [], ["uint16[3]", "address", "bytes"], "view"),
    _fn("getBySemanticVersion", [("_semanticVersion", "uint16[3]")],
        ["uint16[3]", "address", "bytes"], "view"),
]

KERNEL_ROLES = ["APP_MANAGER_ROLE"]
ACL_ROLES = ["CREATE_PERMISSIONS_ROLE"]
