"""
控制台领域规则：付款对账、报表指标、本地化标签
"""
