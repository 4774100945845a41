"""
API layer construct: shared Lambda + HTTP API routes.

A single Lambda keeps warm caches and reduces cold start costs.
Uses Docker bundling for dependencies (runs in CI/CD pipeline).
"""

from aws_cdk import (
    BundlingOptions,
    Duration,
    aws_apigatewayv2 as apigw,
    aws_apigatewayv2_authorizers as authorizers,
    aws_apigatewayv2_integrations as integrations,
    aws_cognito as cognito,
    aws_ec2 as ec2,
    aws_lambda as _lambda,
    aws_logs as logs,
)
from constructs import Construct

# Routes reachable without a Cognito access token.
PUBLIC_ROUTES = {
    (apigw.HttpMethod.GET, "/health"),
    (apigw.HttpMethod.POST, "/auth/login"),
}

ROUTE_DEFS = [
    (apigw.HttpMethod.GET, "/health"),
    (apigw.HttpMethod.POST, "/auth/login"),
    (apigw.HttpMethod.POST, "/auth/logout"),
    (apigw.HttpMethod.GET, "/auth/me"),
    (apigw.HttpMethod.GET, "/dashboard"),
    (apigw.HttpMethod.GET, "/analytics"),
    (apigw.HttpMethod.GET, "/customers"),
    (apigw.HttpMethod.POST, "/customers/seed"),
    (apigw.HttpMethod.GET, "/customers/{id}"),
    (apigw.HttpMethod.GET, "/customers/{id}/insights"),
    (apigw.HttpMethod.GET, "/customers/{id}/recommendations"),
    (apigw.HttpMethod.GET, "/customers/{id}/clv"),
    (apigw.HttpMethod.GET, "/segments"),
    (apigw.HttpMethod.POST, "/segments/generate"),
    (apigw.HttpMethod.POST, "/segments/seed"),
    (apigw.HttpMethod.GET, "/segments/{id}/customers"),
    (apigw.HttpMethod.GET, "/insights"),
    (apigw.HttpMethod.POST, "/insights/generate"),
    (apigw.HttpMethod.POST, "/insights/{id}/status"),
    (apigw.HttpMethod.GET, "/risk-assessments"),
    (apigw.HttpMethod.POST, "/risk-assessments/run"),
    (apigw.HttpMethod.POST, "/risk-assessments/{id}/status"),
]


class ApiLayerConstruct(Construct):
    """Expose the banking intelligence pages via HTTP API."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        vpc: ec2.IVpc,
        db_secret_arn: str,
        model_id: str,
        user_pool: cognito.IUserPool,
        user_pool_client: cognito.IUserPoolClient,
        lambda_memory_mb: int = 512,
        lambda_timeout_seconds: int = 30,
        extra_environment: dict = None,
    ) -> None:
        super().__init__(scope, construct_id)

        # Bundle Lambda code with dependencies using Docker (works in CI/CD)
        bundled_code = _lambda.Code.from_asset(
            "src",
            bundling=BundlingOptions(
                image=_lambda.Runtime.PYTHON_3_12.bundling_image,
                command=[
                    "bash", "-c",
                    "pip install -r requirements-lambda.txt -t /asset-output && "
                    "cp -r . /asset-output"
                ],
            ),
        )

        self.main_lambda = _lambda.Function(
            self,
            "ApiHandler",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="handlers.main.lambda_handler",
            code=bundled_code,
            memory_size=lambda_memory_mb,
            timeout=Duration.seconds(lambda_timeout_seconds),
            architecture=_lambda.Architecture.X86_64,
            vpc=vpc,
            environment={
                "ENVIRONMENT": environment,
                "DB_SECRET_ARN": db_secret_arn,
                "MODEL_ID": model_id,
                "COGNITO_CLIENT_ID": user_pool_client.user_pool_client_id,
                **(extra_environment or {}),
            },
            log_retention=logs.RetentionDays.ONE_WEEK,
        )

        # HTTP API with minimal latency and low cost.
        self.api = apigw.HttpApi(
            self,
            "HttpApi",
            api_name=f"banking-intel-api-{environment}",
            cors_preflight=apigw.CorsPreflightOptions(
                allow_origins=["*"],
                allow_methods=[apigw.CorsHttpMethod.ANY],
                allow_headers=["Authorization", "Content-Type"],
            ),
        )

        integration = integrations.HttpLambdaIntegration(
            "LambdaIntegration", self.main_lambda
        )
        authorizer = authorizers.HttpUserPoolAuthorizer(
            "CognitoAuthorizer",
            user_pool,
            user_pool_clients=[user_pool_client],
        )

        for method, path in ROUTE_DEFS:
            self.api.add_routes(
                path=path,
                methods=[method],
                integration=integration,
                authorizer=None if (method, path) in PUBLIC_ROUTES else authorizer,
            )
