class AppStatusCode:
    # Success
    DATA_RETRIEVED_SUCCESSFULLY = "100"
    CREATED_SUCCESSFULLY = "101"
    UPDATED_SUCCESSFULLY = "102"
    DELETED_SUCCESSFULLY = "103"

    # Authentication / authorization
    AUTHENTICATION_TOKEN_INVALID = "200"
    AUTHENTICATION_TOKEN_EXPIRED = "201"
    AUTHENTICATION_USER_INVALID = "202"
    AUTHENTICATION_USER_INACTIVE = "203"
    AUTHENTICATION_UNAUTHORIZED_ACCESS = "204"
    UNAUTHORIZED_ACTION = "205"

    # Validation
    REQUIRED_VALIDATION_ERROR = "300"
    INVALID_INPUT = "301"

    # Conflicts
    DUPLICATE_ADD_ERROR = "400"
    ASSET_ALREADY_ASSIGNED = "401"
    ASSIGNMENT_LIMIT_REACHED = "402"
    ASSET_DELETE_BLOCKED = "403"
    INVALID_STATE_TRANSITION = "404"

    # Lookup / infrastructure
    RESOURCE_NOT_FOUND = "500"
    OPERATION_ERROR = "501"
    OPERATION_FAILED = "502"
