# authguard/shared/utils/error_responses.py

# Respostas de erro genéricas
common_errors = {
    500: {
        "description": "Internal server error",
        "content": {
            "application/json": {
                "example": {
                    "success": False,
                    "error": "Internal server error.",
                    "code": "INTERNAL_SERVER_ERROR",
                }
            }
        }
    }
}

# Erros de autenticação (token ausente, inválido, expirado ou revogado)
auth_errors = {
    401: {
        "description": "Unauthorized (missing, invalid, expired or revoked token)",
        "content": {
            "application/json": {
                "examples": {
                    "invalid_token": {
                        "summary": "Invalid Token",
                        "value": {"success": False, "error": "Invalid or expired token.", "code": "EXPIRED_TOKEN"}
                    },
                    "missing_token": {
                        "summary": "Missing Token",
                        "value": {"success": False, "error": "Authentication required.",
                                  "code": "AUTHENTICATION_FAILED"}
                    },
                    "revoked_token": {
                        "summary": "Revoked Token",
                        "value": {"success": False, "error": "Invalid or expired token.", "code": "TOKEN_REVOKED"}
                    }
                }
            }
        }
    },
    **common_errors
}

# Erros de upload
upload_errors = {
    400: {
        "description": "Bad Request (file rejected by security validation)",
        "content": {
            "application/json": {
                "examples": {
                    "too_large": {
                        "summary": "File Too Large",
                        "value": {"success": False, "error": "File must be at most 3MB.",
                                  "code": "SECURITY_VIOLATION"}
                    },
                    "invalid_image": {
                        "summary": "Not A Valid Image",
                        "value": {"success": False, "error": "File content is not a valid image of the declared type.",
                                  "code": "SECURITY_VIOLATION"}
                    }
                }
            }
        }
    },
    **auth_errors
}
