from lakeshare.table_permissions import resource


def lambda_handler(event, context):
    return resource(event, context)
